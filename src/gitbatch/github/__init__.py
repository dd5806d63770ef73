"""GitHub REST client for gitbatch.

Provides an httpx client with retry for the branch and Git Data
endpoints, and its error hierarchy.
"""

from gitbatch.github.client import GitHubClient
from gitbatch.github.errors import (
    GitHubAuthError,
    GitHubClientError,
    GitHubConfigError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubResponseError,
    GitHubValidationError,
)

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "GitHubConfigError",
    "GitHubAuthError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubValidationError",
    "GitHubResponseError",
]
