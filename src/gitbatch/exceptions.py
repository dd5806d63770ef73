"""gitbatch exception hierarchy.

All gitbatch-specific exceptions inherit from GitBatchError.
"""

from __future__ import annotations

import enum


class GitBatchError(Exception):
    """Base exception for all gitbatch errors."""


class NotFoundError(GitBatchError):
    """Base for lookups whose target does not exist."""


class BranchNotFoundError(NotFoundError):
    """Raised when a branch lookup fails."""

    def __init__(self, branch_name: str, repo: str | None = None) -> None:
        self.branch_name = branch_name
        self.repo = repo
        where = f" in {repo}" if repo else ""
        super().__init__(f"Branch not found: {branch_name}{where}")


class ObjectNotFoundError(NotFoundError):
    """Raised when a commit, tree or blob is missing from the object store."""

    def __init__(self, oid: str, expected: str | None = None) -> None:
        self.oid = oid
        self.expected = expected
        kind = expected or "object"
        super().__init__(f"{kind.capitalize()} not found: {oid}")


class InvalidPathError(GitBatchError):
    """Raised when a change path is not a clean slash-delimited path."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path '{path}': {reason}")


class PathConflictError(GitBatchError):
    """Raised when a change expects a directory where a file exists, or vice versa.

    ``segment`` is the path prefix at which the conflict was detected.
    """

    def __init__(self, path: str, segment: str, expected: str, found: str) -> None:
        self.path = path
        self.segment = segment
        self.expected = expected
        self.found = found
        super().__init__(
            f"Path conflict at '{segment}' while applying '{path}': "
            f"expected {expected}, found {found}"
        )


class InvalidBranchNameError(GitBatchError):
    """Raised when a branch name violates naming rules."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid branch name '{name}': {reason}")


class InvalidBatchSizeError(GitBatchError, ValueError):
    """Raised when a batch size is smaller than one."""

    def __init__(self, group_size: object) -> None:
        self.group_size = group_size
        super().__init__(f"Batch size must be a positive integer, got {group_size!r}")


class ObjectWriteError(GitBatchError):
    """Raised when a blob, tree or commit could not be created.

    Attributes:
        step: Which step failed ("tree" or "commit").
        target: The commit (for "tree") or tree (for "commit") being processed.
    """

    def __init__(self, message: str, *, step: str, target: str) -> None:
        self.step = step
        self.target = target
        super().__init__(message)


class RefUpdateFailure(str, enum.Enum):
    """Why a reference update was refused."""

    NON_FAST_FORWARD = "non_fast_forward"
    TRANSPORT = "transport"

    def __str__(self) -> str:
        return self.value


class RefUpdateError(GitBatchError):
    """Raised when a branch reference could not be moved."""

    def __init__(
        self,
        ref: str,
        target: str,
        reason: RefUpdateFailure = RefUpdateFailure.TRANSPORT,
        details: str = "",
    ) -> None:
        self.ref = ref
        self.target = target
        self.reason = reason
        msg = f"Error updating ref {ref} to {target} ({reason})"
        if details:
            msg += f": {details}"
        super().__init__(msg)

    @property
    def rejected(self) -> bool:
        """True when the remote refused a non-fast-forward update."""
        return self.reason == RefUpdateFailure.NON_FAST_FORWARD


class NonFastForwardError(RefUpdateError):
    """Raised when a non-force update would discard history on the branch."""

    def __init__(self, ref: str, target: str, current: str | None = None) -> None:
        self.current = current
        details = f"current head {current} is not an ancestor" if current else ""
        super().__init__(ref, target, RefUpdateFailure.NON_FAST_FORWARD, details)


class TransportError(GitBatchError):
    """Raised when transmitting objects or refs to the remote fails."""
