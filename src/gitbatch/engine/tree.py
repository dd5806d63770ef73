"""Tree builder for gitbatch.

Merges a sparse list of path changes into an existing tree. Each directory
level is an immutable listing: applying a change returns a fresh listing,
and a parent splices in the id of the child tree it just wrote. Changes are
applied as a left fold so that edits sharing a directory compose.

Empty directories are pruned: when the last entry under a directory is
deleted, the directory entry is removed from its parent as well.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import TYPE_CHECKING, Optional, Sequence

from gitbatch.exceptions import PathConflictError
from gitbatch.models.changes import FileMode
from gitbatch.models.tree import TreeEntry

if TYPE_CHECKING:
    from gitbatch.models.changes import ChangeEntry
    from gitbatch.models.tree import TreeListing
    from gitbatch.storage.repositories import ObjectStore

logger = logging.getLogger(__name__)


def _find(listing: TreeListing, name: str) -> Optional[int]:
    for i, entry in enumerate(listing):
        if entry.name == name:
            return i
    return None


def _upsert(listing: TreeListing, index: Optional[int], entry: TreeEntry) -> TreeListing:
    updated = list(listing)
    if index is None:
        updated.append(entry)
    else:
        updated[index] = entry
    return updated


def _remove(listing: TreeListing, index: Optional[int]) -> TreeListing:
    if index is None:
        return listing
    return listing[:index] + listing[index + 1:]


def _leaf_entry(name: str, change: ChangeEntry, oid: str) -> TreeEntry:
    if change.mode is FileMode.SUBMODULE:
        return TreeEntry.submodule(name, oid)
    return TreeEntry.blob(name, oid, change.mode)


def _write_one(store: ObjectStore, change: ChangeEntry) -> Optional[str]:
    if change.is_deletion:
        return None
    if change.mode is FileMode.SUBMODULE:
        # submodule entries point at a commit in another repository
        return change.content.decode("ascii").strip()
    return store.write_blob(change.content)


def write_blobs(
    store: ObjectStore,
    changes: Sequence[ChangeEntry],
    max_workers: int = 1,
) -> list[Optional[str]]:
    """Write the blob for every content-bearing change.

    Blob writes are independent of each other and may run on a thread
    pool; the call returns only once every write has finished.

    Returns:
        One object id per change, aligned with ``changes``; None for
        deletions.
    """
    if max_workers <= 1 or len(changes) <= 1:
        return [_write_one(store, change) for change in changes]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda change: _write_one(store, change), changes))


def _apply(
    store: ObjectStore,
    listing: TreeListing,
    change: ChangeEntry,
    depth: int,
    oid: Optional[str],
) -> TreeListing:
    parts = change.parts
    name = parts[depth]
    segment = "/".join(parts[: depth + 1])
    index = _find(listing, name)
    existing = listing[index] if index is not None else None

    if depth == len(parts) - 1:
        if change.is_deletion:
            return _remove(listing, index)
        if existing is not None and existing.is_tree:
            raise PathConflictError(change.path, segment, "file", "directory")
        return _upsert(listing, index, _leaf_entry(name, change, oid))

    if existing is not None and not existing.is_tree:
        raise PathConflictError(change.path, segment, "directory", "file")
    if existing is None and change.is_deletion:
        # nothing to delete below a directory that does not exist
        return listing

    subtree = store.read_tree(existing.oid) if existing is not None else []
    updated = _apply(store, subtree, change, depth + 1, oid)
    if updated == subtree:
        return listing
    if not updated:
        return _remove(listing, index)

    subtree_oid = store.write_tree(updated)
    return _upsert(listing, index, TreeEntry.tree(name, subtree_oid))


def apply_change(
    store: ObjectStore,
    listing: TreeListing,
    change: ChangeEntry,
    oid: Optional[str] = None,
) -> TreeListing:
    """Apply one change to a root listing and return the new listing.

    Subtrees along the change's path are read from and written to
    ``store``; the input listing is never modified.

    Args:
        store: Object store holding the existing subtrees.
        listing: Root-level entries to apply the change to.
        change: The change to apply.
        oid: Pre-written blob id for the change's content. Written on
            demand when omitted.

    Raises:
        PathConflictError: If the change needs a directory where a file
            exists, or a file where a directory exists.
    """
    if oid is None:
        oid = _write_one(store, change)
    return _apply(store, listing, change, 0, oid)


def build_tree(
    store: ObjectStore,
    existing_tree_id: Optional[str],
    changes: Sequence[ChangeEntry],
    *,
    max_workers: int = 1,
) -> str:
    """Merge ``changes`` into the tree ``existing_tree_id`` and return the new tree id.

    Untouched entries at every level are carried over unchanged. When the
    changes leave the tree as it was (e.g. deleting absent paths), the
    existing id is returned and nothing is written.

    Args:
        store: Object store to read and write trees and blobs.
        existing_tree_id: Root tree to start from; None for an empty tree.
        changes: Changes applied in order; a later change to the same
            path wins.
        max_workers: Threads used for writing blobs.

    Raises:
        PathConflictError: On a file/directory collision.
    """
    root = store.read_tree(existing_tree_id) if existing_tree_id is not None else []
    oids = write_blobs(store, changes, max_workers=max_workers)

    listing = reduce(
        lambda acc, item: apply_change(store, acc, item[0], item[1]),
        zip(changes, oids),
        root,
    )

    if existing_tree_id is not None and listing == root:
        logger.debug("Changes left tree %s untouched", existing_tree_id)
        return existing_tree_id
    tree_id = store.write_tree(listing)
    logger.debug("Built tree %s from %d change(s)", tree_id, len(changes))
    return tree_id


def read_tree_recursive(
    store: ObjectStore,
    tree_id: str,
    prefix: str = "",
) -> dict[str, TreeEntry]:
    """Flatten a tree into ``{path: entry}`` for every non-directory entry."""
    result: dict[str, TreeEntry] = {}
    for entry in store.read_tree(tree_id):
        path = f"{prefix}{entry.name}"
        if entry.is_tree:
            result.update(read_tree_recursive(store, entry.oid, f"{path}/"))
        else:
            result[path] = entry
    return result
