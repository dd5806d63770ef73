"""gitbatch: batched multi-file commits against a remote Git branch.

Merges a sparse set of file changes into an existing tree, packages them
as a linear chain of commits, advances the branch and pushes the result.
"""

from gitbatch._version import __version__

# Change set and object models
from gitbatch.models.changes import (
    ChangeEntry,
    Changes,
    FileData,
    FileMode,
    generate_change_entries,
)
from gitbatch.models.tree import TreeEntry
from gitbatch.models.commit import ChainResult, CommitNode, UserData
from gitbatch.models.branch import BranchDomain, RepoDomain
from gitbatch.models.config import DEFAULT_FILES_PER_COMMIT, PushOptions
from gitbatch.models.push import PushResult

# Protocols
from gitbatch.protocols import CommitPayload, CommitSigner

# Engine
from gitbatch.engine.tree import apply_change, build_tree, read_tree_recursive
from gitbatch.engine.batching import partition
from gitbatch.engine.commit import CommitChainer
from gitbatch.engine.refs import update_ref
from gitbatch.engine.push import commit_and_push

# Branch operations
from gitbatch.operations.branch import branch, create_ref, validate_branch_name

# Object stores
from gitbatch.storage.repositories import ObjectStore
from gitbatch.storage.local import DulwichObjectStore
from gitbatch.storage.github import GitHubObjectStore
from gitbatch.github.client import GitHubClient

# Exceptions
from gitbatch.exceptions import (
    BranchNotFoundError,
    GitBatchError,
    InvalidBatchSizeError,
    InvalidBranchNameError,
    InvalidPathError,
    NonFastForwardError,
    NotFoundError,
    ObjectNotFoundError,
    ObjectWriteError,
    PathConflictError,
    RefUpdateError,
    RefUpdateFailure,
    TransportError,
)

__all__ = [
    "__version__",
    # Models
    "ChangeEntry",
    "Changes",
    "FileData",
    "FileMode",
    "generate_change_entries",
    "TreeEntry",
    "ChainResult",
    "CommitNode",
    "UserData",
    "BranchDomain",
    "RepoDomain",
    "DEFAULT_FILES_PER_COMMIT",
    "PushOptions",
    "PushResult",
    # Protocols
    "CommitPayload",
    "CommitSigner",
    # Engine
    "apply_change",
    "build_tree",
    "read_tree_recursive",
    "partition",
    "CommitChainer",
    "update_ref",
    "commit_and_push",
    # Branch operations
    "branch",
    "create_ref",
    "validate_branch_name",
    # Stores
    "ObjectStore",
    "DulwichObjectStore",
    "GitHubObjectStore",
    "GitHubClient",
    # Exceptions
    "GitBatchError",
    "NotFoundError",
    "BranchNotFoundError",
    "ObjectNotFoundError",
    "InvalidPathError",
    "InvalidBranchNameError",
    "InvalidBatchSizeError",
    "PathConflictError",
    "ObjectWriteError",
    "RefUpdateError",
    "RefUpdateFailure",
    "NonFastForwardError",
    "TransportError",
]
