"""Repository and branch coordinates for gitbatch."""

from __future__ import annotations

from pydantic import BaseModel

REF_PREFIX = "refs/heads/"


class RepoDomain(BaseModel):
    """The owner/name coordinates of a remote repository."""

    model_config = {"frozen": True}

    owner: str
    repo: str

    @classmethod
    def parse(cls, slug: str) -> RepoDomain:
        """Parse ``"owner/repo"``."""
        owner, sep, repo = slug.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected OWNER/REPO, got {slug!r}")
        return cls(owner=owner, repo=repo)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.full_name


class BranchDomain(RepoDomain):
    """A branch within a remote repository."""

    branch: str

    @property
    def ref(self) -> str:
        return REF_PREFIX + self.branch

    def __str__(self) -> str:
        return f"{self.full_name}:{self.branch}"
