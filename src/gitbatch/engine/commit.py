"""Commit chainer for gitbatch.

Turns a sequence of change batches into a linear chain of commits: each
batch is merged into the previous commit's tree and committed with that
commit as its only parent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from gitbatch.engine.tree import build_tree
from gitbatch.exceptions import NotFoundError, ObjectWriteError, PathConflictError
from gitbatch.models.commit import ChainResult, CommitNode
from gitbatch.protocols import CommitPayload

if TYPE_CHECKING:
    from gitbatch.models.changes import ChangeEntry
    from gitbatch.models.commit import UserData
    from gitbatch.protocols import CommitSigner
    from gitbatch.storage.repositories import ObjectStore

logger = logging.getLogger(__name__)


class CommitChainer:
    """Builds trees and commits for successive batches on one store.

    Nothing here touches a ref: a failure part-way leaves only
    unreferenced objects behind.

    Args:
        store: Object store to write trees, blobs and commits to.
        signer: Optional capability used to sign every commit.
        author: Author identity; the store's default when None.
        committer: Committer identity; falls back to the author.
        blob_workers: Threads used for blob writes within a batch.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        signer: Optional[CommitSigner] = None,
        author: Optional[UserData] = None,
        committer: Optional[UserData] = None,
        blob_workers: int = 1,
    ) -> None:
        self._store = store
        self._signer = signer
        self._author = author
        self._committer = committer
        self._blob_workers = blob_workers

    def create_tree(self, head: str, changes: Sequence[ChangeEntry]) -> str:
        """Merge ``changes`` into the tree of commit ``head``.

        Raises:
            ObjectWriteError: If reading or writing objects fails.
            PathConflictError: On a file/directory collision.
        """
        try:
            base_tree = self._store.get_commit_tree(head)
            logger.info("Got the latest commit tree")
            tree_id = build_tree(
                self._store, base_tree, changes, max_workers=self._blob_workers
            )
        except (PathConflictError, NotFoundError):
            raise
        except Exception as e:
            raise ObjectWriteError(
                f"Error adding to tree: {head}", step="tree", target=head
            ) from e
        logger.info("Successfully created a tree with the desired changes with SHA %s", tree_id)
        return tree_id

    def create_commit(self, head: str, tree_id: str, message: str) -> str:
        """Commit ``tree_id`` on top of ``head`` and return the new commit id.

        Raises:
            ObjectWriteError: If signing or writing the commit fails.
        """
        parents = [head]
        try:
            signature = None
            if self._signer is not None:
                signature = self._signer.generate_signature(
                    CommitPayload(
                        message=message,
                        tree=tree_id,
                        parents=tuple(parents),
                        author=self._author,
                        committer=self._committer,
                    )
                )
            sha = self._store.create_commit(
                CommitNode(
                    tree=tree_id,
                    parents=parents,
                    message=message,
                    author=self._author,
                    committer=self._committer,
                    signature=signature,
                )
            )
        except (PathConflictError, NotFoundError):
            raise
        except Exception as e:
            raise ObjectWriteError(
                f"Error creating commit for: {tree_id}", step="commit", target=tree_id
            ) from e
        logger.info("Successfully created commit. See commit at %s", sha)
        return sha

    def commit_batches(
        self,
        base_commit_id: str,
        batches: Sequence[Sequence[ChangeEntry]],
        message: str,
    ) -> ChainResult:
        """Commit each batch in order, chaining parents from ``base_commit_id``.

        Every commit reuses ``message``: batches package one logical change.
        """
        head = base_commit_id
        commits: list[str] = []
        for i, batch in enumerate(batches, start=1):
            logger.info("Committing batch %d/%d (%d file(s))", i, len(batches), len(batch))
            tree_id = self.create_tree(head, batch)
            head = self.create_commit(head, tree_id, message)
            commits.append(head)
        return ChainResult(base=base_commit_id, head=head, commits=commits)
