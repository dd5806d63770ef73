"""Commit domain models for gitbatch.

UserData is an author/committer identity.
CommitNode describes a commit object as read from or written to a store.
ChainResult is what the commit chainer hands back after a run of batches.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


class UserData(BaseModel):
    """Author or committer identity.

    ``timestamp`` defaults to the time the commit is created.
    ``timezone_offset`` is in minutes east of UTC.
    """

    model_config = {"frozen": True}

    name: str
    email: str
    timestamp: Optional[datetime] = None
    timezone_offset: int = 0

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    def resolved_time(self) -> datetime:
        """The identity's timestamp, or now (UTC) if none was set."""
        return self.timestamp or datetime.now(timezone.utc)


DEFAULT_IDENTITY = UserData(name="gitbatch", email="gitbatch@users.noreply.github.com")


class CommitNode(BaseModel):
    """A commit object: snapshot tree plus linkage and metadata."""

    oid: Optional[str] = None
    tree: str
    parents: list[str] = []
    message: str
    author: Optional[UserData] = None
    committer: Optional[UserData] = None
    signature: Optional[str] = None

    def __str__(self) -> str:
        short = (self.oid or "<unwritten>")[:8]
        first_line = self.message.splitlines()[0] if self.message else ""
        return f"{short} {first_line}"


class ChainResult(BaseModel):
    """Outcome of committing a sequence of batches.

    ``commits`` lists the new commit ids oldest first; ``head`` is the
    last of them, or ``base`` when there was nothing to commit.
    """

    base: str
    head: str
    commits: list[str] = []
