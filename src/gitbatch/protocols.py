"""Protocol definitions for gitbatch.

Defines the pluggable CommitSigner capability and the frozen
CommitPayload it signs over.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gitbatch.models.commit import UserData


@dataclass(frozen=True)
class CommitPayload:
    """The commit fields a signature covers."""

    message: str
    tree: str
    parents: tuple[str, ...]
    author: Optional[UserData] = None
    committer: Optional[UserData] = None


@runtime_checkable
class CommitSigner(Protocol):
    """Produces detached signature material for a commit.

    Implementations return an ASCII-armored signature (GPG or SSH); it is
    stored verbatim in the commit's ``gpgsig`` header.
    """

    def generate_signature(self, commit: CommitPayload) -> str: ...
