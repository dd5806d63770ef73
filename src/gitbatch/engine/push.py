"""Push orchestrator for gitbatch.

Sequences batching, commit chaining, the ref update and the transport
push. Each step runs only if the previous one succeeded, and the first
failure propagates untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from gitbatch.engine.batching import partition
from gitbatch.engine.commit import CommitChainer
from gitbatch.engine.refs import update_ref
from gitbatch.models.changes import generate_change_entries
from gitbatch.models.config import PushOptions
from gitbatch.models.push import PushResult

if TYPE_CHECKING:
    from gitbatch.models.branch import BranchDomain
    from gitbatch.models.changes import Changes
    from gitbatch.storage.repositories import ObjectStore

logger = logging.getLogger(__name__)


def commit_and_push(
    store: ObjectStore,
    base_commit_id: str,
    changes: Changes,
    branch: BranchDomain,
    message: str,
    force: bool = False,
    options: Optional[PushOptions] = None,
) -> PushResult:
    """Apply ``changes`` on top of ``base_commit_id`` and publish them on ``branch``.

    Changes are split into groups of ``options.files_per_commit``, each
    committed on top of the previous one. The branch is moved only after
    every commit exists, so a failure leaves it at its old head.

    Args:
        store: Object store to write to and push from.
        base_commit_id: Commit the first batch is layered on.
        changes: Path to content mapping; None content deletes the path.
        branch: Branch to advance.
        message: Message used for every commit.
        force: Overwrite the branch even if not a fast-forward.
        options: Batch size, identities, signer.

    Returns:
        PushResult describing the new head and the commits created.

    Raises:
        PathConflictError: A change collides with the existing tree.
        ObjectWriteError: Creating a tree or commit failed.
        RefUpdateError: The branch could not be moved
            (NonFastForwardError when rejected).
        TransportError: Transmitting to the remote failed.
    """
    options = options or PushOptions()
    entries = generate_change_entries(changes)
    batches = partition(entries, options.files_per_commit)

    chainer = CommitChainer(
        store,
        signer=options.signer,
        author=options.author,
        committer=options.committer,
        blob_workers=options.blob_workers,
    )
    chain = chainer.commit_batches(base_commit_id, batches, message)

    update_ref(store, branch, chain.head, force)
    store.push(branch, force=force, **options.transport)
    logger.info("Pushed to remote repository successfully")

    return PushResult(
        branch=branch,
        base=base_commit_id,
        head=chain.head,
        commits=chain.commits,
        files_changed=len(entries),
        forced=force,
    )
