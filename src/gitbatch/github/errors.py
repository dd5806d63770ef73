"""GitHub client error hierarchy.

All GitHub errors inherit from GitBatchError for consistent exception handling.
"""

from __future__ import annotations

from gitbatch.exceptions import GitBatchError, NotFoundError


class GitHubClientError(GitBatchError):
    """Base for all GitHub client errors.

    Attributes:
        status_code: HTTP status of the failed response, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class GitHubConfigError(GitHubClientError):
    """Missing or invalid client configuration (e.g., no token)."""


class GitHubAuthError(GitHubClientError):
    """Authentication failed (401/403)."""


class GitHubNotFoundError(GitHubClientError, NotFoundError):
    """The requested resource does not exist (404)."""


class GitHubRateLimitError(GitHubClientError):
    """Rate limited by the API.

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=429)


class GitHubValidationError(GitHubClientError):
    """The API rejected the request payload (422)."""


class GitHubResponseError(GitHubClientError):
    """Unexpected response format from the API."""
