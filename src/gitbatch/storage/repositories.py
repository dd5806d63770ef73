"""Abstract object store interface for gitbatch.

Defines the contract every backend (local dulwich repository, GitHub Git
Data API) implements. No backend imports here -- pure abstract contract.

Object ids are lowercase hex strings throughout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from gitbatch.models.branch import BranchDomain
    from gitbatch.models.commit import CommitNode
    from gitbatch.models.tree import TreeEntry


class ObjectStore(ABC):
    """Abstract interface for reading and writing git objects and refs."""

    @abstractmethod
    def get_commit_tree(self, commit_id: str) -> str:
        """Return the tree id of a commit.

        Raises ObjectNotFoundError if the commit does not exist.
        """
        ...

    @abstractmethod
    def read_tree(self, tree_id: str) -> list[TreeEntry]:
        """Return the entries of one tree level.

        Raises ObjectNotFoundError if the tree does not exist.
        """
        ...

    @abstractmethod
    def write_blob(self, content: bytes) -> str:
        """Store file content and return its blob id."""
        ...

    @abstractmethod
    def write_tree(self, entries: Sequence[TreeEntry]) -> str:
        """Store a full tree listing and return its id."""
        ...

    @abstractmethod
    def create_commit(self, commit: CommitNode) -> str:
        """Store a commit object and return its id.

        ``commit.oid`` is ignored; ``commit.signature``, when set, is
        embedded as the commit's signature header.
        """
        ...

    @abstractmethod
    def write_ref(self, branch: BranchDomain, target: str, *, force: bool = False) -> None:
        """Point ``branch`` at ``target``, creating the ref if needed.

        Raises NonFastForwardError when ``force`` is false and ``target``
        does not descend from the branch's current head.
        """
        ...

    @abstractmethod
    def push(self, branch: BranchDomain, *, force: bool = False, **transport: Any) -> None:
        """Transmit new objects and the branch ref to the remote.

        ``transport`` carries backend-specific settings (credentials, depth)
        and is otherwise opaque. Backends that write directly to the remote
        implement this as a no-op.
        Raises TransportError on network or authentication failure.
        """
        ...
