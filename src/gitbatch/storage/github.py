"""GitHub Git Data API object store.

Every object is written straight to the remote repository, so ``push``
has nothing left to transmit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Sequence

from gitbatch.exceptions import NonFastForwardError, ObjectNotFoundError
from gitbatch.github.errors import GitHubNotFoundError, GitHubValidationError
from gitbatch.models.changes import FileMode
from gitbatch.models.tree import TreeEntry
from gitbatch.storage.repositories import ObjectStore

if TYPE_CHECKING:
    from gitbatch.github.client import GitHubClient
    from gitbatch.models.branch import BranchDomain, RepoDomain
    from gitbatch.models.commit import CommitNode, UserData

logger = logging.getLogger(__name__)


def _identity(user: UserData) -> dict:
    data = {"name": user.name, "email": user.email}
    if user.timestamp is not None:
        data["date"] = user.timestamp.isoformat()
    return data


class GitHubObjectStore(ObjectStore):
    """ObjectStore over the GitHub Git Data REST API for one repository."""

    def __init__(self, client: GitHubClient, repo: RepoDomain) -> None:
        self._client = client
        self._owner = repo.owner
        self._repo = repo.repo

    def get_commit_tree(self, commit_id: str) -> str:
        try:
            data = self._client.get_commit(self._owner, self._repo, commit_id)
        except GitHubNotFoundError:
            raise ObjectNotFoundError(commit_id, "commit") from None
        return data["tree"]["sha"]

    def read_tree(self, tree_id: str) -> list[TreeEntry]:
        try:
            data = self._client.get_tree(self._owner, self._repo, tree_id)
        except GitHubNotFoundError:
            raise ObjectNotFoundError(tree_id, "tree") from None
        entries = []
        for item in data.get("tree", []):
            mode = FileMode.from_octal(item["mode"])
            entries.append(
                TreeEntry(name=item["path"], mode=mode, oid=item["sha"], type=mode.object_type)
            )
        return entries

    def write_blob(self, content: bytes) -> str:
        return self._client.create_blob(self._owner, self._repo, content)

    def write_tree(self, entries: Sequence[TreeEntry]) -> str:
        tree = [
            {"path": e.name, "mode": e.mode.value, "type": e.type, "sha": e.oid}
            for e in entries
        ]
        return self._client.create_tree(self._owner, self._repo, tree)

    def create_commit(self, commit: CommitNode) -> str:
        payload: dict = {
            "message": commit.message,
            "tree": commit.tree,
            "parents": list(commit.parents),
        }
        if commit.author is not None:
            payload["author"] = _identity(commit.author)
        if commit.committer is not None:
            payload["committer"] = _identity(commit.committer)
        if commit.signature:
            payload["signature"] = commit.signature
        return self._client.create_commit(self._owner, self._repo, payload)

    def write_ref(self, branch: BranchDomain, target: str, *, force: bool = False) -> None:
        try:
            self._client.update_ref(self._owner, self._repo, branch.ref, target, force=force)
        except GitHubNotFoundError:
            self._create_ref(branch, target)
        except GitHubValidationError as e:
            # GitHub answers 422 both for a missing ref and for a rejected update
            reason = str(e).lower()
            if "reference does not exist" in reason:
                self._create_ref(branch, target)
            elif "not a fast forward" in reason and not force:
                raise NonFastForwardError(branch.ref, target) from e
            else:
                raise

    def _create_ref(self, branch: BranchDomain, target: str) -> None:
        logger.info("Reference %s does not exist yet, creating it", branch.ref)
        self._client.create_ref(self._owner, self._repo, branch.ref, target)

    def push(self, branch: BranchDomain, *, force: bool = False, **transport: Any) -> None:
        logger.debug("Objects for %s already written through the API", branch.ref)
