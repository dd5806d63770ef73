"""Push result model for gitbatch."""

from __future__ import annotations

from pydantic import BaseModel

from gitbatch.models.branch import BranchDomain


class PushResult(BaseModel):
    """What a completed push did to the branch."""

    branch: BranchDomain
    base: str
    head: str
    commits: list[str] = []
    files_changed: int = 0
    forced: bool = False

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    def __str__(self) -> str:
        return (
            f"{self.branch}: {self.base[:8]}..{self.head[:8]} "
            f"({self.commit_count} commit(s), {self.files_changed} file(s))"
        )
