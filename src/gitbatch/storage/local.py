"""Dulwich-backed object store.

Writes objects into a local repository (on disk or in memory) and pushes
the resulting branch to a remote with ``dulwich.porcelain.push``. Git
binary is not required.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from dulwich import porcelain
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import MemoryRepo, Repo

from gitbatch.exceptions import NonFastForwardError, ObjectNotFoundError, TransportError
from gitbatch.models.changes import FileMode
from gitbatch.models.commit import DEFAULT_IDENTITY
from gitbatch.models.tree import TreeEntry
from gitbatch.storage.repositories import ObjectStore

if TYPE_CHECKING:
    from dulwich.repo import BaseRepo

    from gitbatch.models.branch import BranchDomain
    from gitbatch.models.commit import CommitNode, UserData

logger = logging.getLogger(__name__)


def _to_bytes(oid: str) -> bytes:
    return oid.encode("ascii")


def _to_str(oid: bytes) -> str:
    return oid.decode("ascii")


class DulwichObjectStore(ObjectStore):
    """ObjectStore over a dulwich repository.

    Args:
        repo: Any dulwich repository (``Repo`` or ``MemoryRepo``).
        remote_location: URL or path ``push`` transmits to. When None,
            ``push`` only logs and returns.
        transport: Extra keyword arguments for ``porcelain.push``
            (e.g. ``username``/``password``), passed through unexamined.
    """

    def __init__(
        self,
        repo: BaseRepo,
        *,
        remote_location: str | None = None,
        transport: dict[str, Any] | None = None,
    ) -> None:
        self._repo = repo
        self._remote_location = remote_location
        self._transport = dict(transport or {})

    @classmethod
    def open(cls, path: str, **kwargs: Any) -> DulwichObjectStore:
        """Open the repository at ``path``."""
        return cls(Repo(path), **kwargs)

    @classmethod
    def in_memory(cls, **kwargs: Any) -> DulwichObjectStore:
        """Create a store over an empty in-memory repository."""
        return cls(MemoryRepo(), **kwargs)

    @property
    def repo(self) -> BaseRepo:
        return self._repo

    def _get(self, oid: str, cls: type, expected: str):  # type: ignore[no-untyped-def]
        try:
            obj = self._repo.object_store[_to_bytes(oid)]
        except KeyError:
            raise ObjectNotFoundError(oid, expected) from None
        if not isinstance(obj, cls):
            raise ObjectNotFoundError(oid, expected)
        return obj

    # -- reads --------------------------------------------------------------

    def get_commit_tree(self, commit_id: str) -> str:
        commit = self._get(commit_id, Commit, "commit")
        return _to_str(commit.tree)

    def read_tree(self, tree_id: str) -> list[TreeEntry]:
        tree = self._get(tree_id, Tree, "tree")
        entries = []
        for name, mode, sha in tree.items():
            file_mode = FileMode.from_octal(mode)
            entries.append(
                TreeEntry(
                    name=name.decode("utf-8"),
                    mode=file_mode,
                    oid=_to_str(sha),
                    type=file_mode.object_type,
                )
            )
        return entries

    def read_blob(self, blob_id: str) -> bytes:
        return self._get(blob_id, Blob, "blob").data

    # -- writes -------------------------------------------------------------

    def write_blob(self, content: bytes) -> str:
        blob = Blob.from_string(content)
        self._repo.object_store.add_object(blob)
        return _to_str(blob.id)

    def write_tree(self, entries: Sequence[TreeEntry]) -> str:
        tree = Tree()
        for entry in entries:
            tree.add(entry.name.encode("utf-8"), entry.mode.to_octal(), _to_bytes(entry.oid))
        self._repo.object_store.add_object(tree)
        return _to_str(tree.id)

    def create_commit(self, commit: CommitNode) -> str:
        author = commit.author or DEFAULT_IDENTITY
        committer = commit.committer or author

        obj = Commit()
        obj.tree = _to_bytes(commit.tree)
        obj.parents = [_to_bytes(p) for p in commit.parents]
        _set_identity(obj, "author", author)
        _set_identity(obj, "committer", committer)
        obj.encoding = b"UTF-8"
        obj.message = commit.message.encode("utf-8")
        if commit.signature:
            obj.gpgsig = commit.signature.encode("ascii")

        self._repo.object_store.add_object(obj)
        return _to_str(obj.id)

    # -- refs ---------------------------------------------------------------

    def get_ref(self, branch: BranchDomain) -> str | None:
        name = _to_bytes(branch.ref)
        if name not in self._repo.refs:
            return None
        return _to_str(self._repo.refs[name])

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True if ``ancestor`` is reachable from ``descendant`` (inclusive)."""
        target = _to_bytes(ancestor)
        walker = self._repo.get_walker(include=[_to_bytes(descendant)])
        return any(entry.commit.id == target for entry in walker)

    def write_ref(self, branch: BranchDomain, target: str, *, force: bool = False) -> None:
        name = _to_bytes(branch.ref)
        current = self.get_ref(branch)
        if current == target:
            return

        if force:
            self._repo.refs[name] = _to_bytes(target)
            return

        if current is None:
            if not self._repo.refs.add_if_new(name, _to_bytes(target)):
                raise NonFastForwardError(branch.ref, target, self.get_ref(branch))
            return

        if not self.is_ancestor(current, target):
            raise NonFastForwardError(branch.ref, target, current)

        # compare-and-swap against the head checked above
        if not self._repo.refs.set_if_equals(name, _to_bytes(current), _to_bytes(target)):
            raise NonFastForwardError(branch.ref, target, self.get_ref(branch))

    def push(self, branch: BranchDomain, *, force: bool = False, **transport: Any) -> None:
        if self._remote_location is None:
            logger.info("No remote configured, skipping push of %s", branch.ref)
            return

        refspec = f"{branch.ref}:{branch.ref}".encode("utf-8")
        try:
            porcelain.push(
                self._repo,
                self._remote_location,
                refspecs=[refspec],
                force=force,
                **{**self._transport, **transport},
            )
        except porcelain.DivergedBranches as e:
            raise NonFastForwardError(branch.ref, self.get_ref(branch) or "") from e
        except Exception as e:
            raise TransportError(
                f"Error pushing {branch.ref} to {self._remote_location}: {e}"
            ) from e
        logger.info("Pushed %s to %s", branch.ref, self._remote_location)


def _set_identity(obj: Commit, role: str, user: UserData) -> None:
    when = user.resolved_time()
    setattr(obj, role, str(user).encode("utf-8"))
    if role == "author":
        obj.author_time = int(when.timestamp())
        obj.author_timezone = user.timezone_offset * 60
    else:
        obj.commit_time = int(when.timestamp())
        obj.commit_timezone = user.timezone_offset * 60
