"""Reference updater for gitbatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitbatch.exceptions import RefUpdateError, RefUpdateFailure

if TYPE_CHECKING:
    from gitbatch.models.branch import BranchDomain
    from gitbatch.storage.repositories import ObjectStore

logger = logging.getLogger(__name__)


def update_ref(
    store: ObjectStore,
    branch: BranchDomain,
    new_head: str,
    force: bool = False,
) -> None:
    """Move ``branch`` to ``new_head``.

    Without ``force`` the store refuses updates that are not fast-forwards
    of the branch's current head. With ``force`` the ref is overwritten;
    concurrent forced pushes are not arbitrated.

    Raises:
        NonFastForwardError: The update would discard history.
        RefUpdateError: Any other failure (``reason`` is TRANSPORT).
    """
    logger.info("Updating reference heads/%s to %s", branch.branch, new_head)
    try:
        store.write_ref(branch, new_head, force=force)
    except RefUpdateError:
        raise
    except Exception as e:
        raise RefUpdateError(
            branch.ref, new_head, RefUpdateFailure.TRANSPORT, str(e)
        ) from e
    logger.info("Successfully updated reference %s to %s", branch.branch, new_head)
