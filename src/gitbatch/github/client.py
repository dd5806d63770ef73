"""GitHub REST client built on httpx with tenacity retry.

Covers the branch endpoints used by the branch manager and the Git Data
endpoints (commits, trees, blobs, refs) used by GitHubObjectStore.
Reads configuration from constructor arguments or environment variables.
"""

from __future__ import annotations

import base64
import logging
import os
from typing import Any

import httpx
import tenacity

from gitbatch.github.errors import (
    GitHubAuthError,
    GitHubConfigError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubResponseError,
    GitHubValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: 429, 500, 502, 503, 504, connection errors.
    Not retryable: 401, 403, 404, 422, other client errors.
    """
    if isinstance(exc, GitHubAuthError):
        return False
    if isinstance(exc, GitHubRateLimitError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return response.text


class GitHubClient:
    """Sync httpx client for the GitHub REST API.

    Retries transient failures (429, 5xx, connection errors) with
    exponential backoff. Fails immediately on authentication errors.

    Usage::

        with GitHubClient(token="ghp_...") as client:
            branch = client.get_branch("octocat", "hello-world", "main")
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: API token. Falls back to GITBATCH_GITHUB_TOKEN, then
                GITHUB_TOKEN env vars.
            base_url: API base URL. Falls back to GITBATCH_API_URL env var,
                then to https://api.github.com.
            timeout: Request timeout in seconds.
            max_retries: Maximum number of attempts for retryable errors.
            transport: Custom httpx transport (used by tests).

        Raises:
            GitHubConfigError: If no token is provided or found in environment.
        """
        self._token = (
            token
            or os.environ.get("GITBATCH_GITHUB_TOKEN")
            or os.environ.get("GITHUB_TOKEN", "")
        )
        if not self._token:
            raise GitHubConfigError(
                "No API token provided. Pass token= or set GITBATCH_GITHUB_TOKEN "
                "environment variable."
            )
        self._base_url = (
            base_url or os.environ.get("GITBATCH_API_URL", DEFAULT_API_URL)
        ).rstrip("/")
        self._max_retries = max_retries
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self._token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Send a request with retry and return the decoded JSON body.

        Raises:
            GitHubAuthError: On 401/403 (no retry).
            GitHubNotFoundError: On 404.
            GitHubValidationError: On 422.
            GitHubRateLimitError: On 429 after all retries exhausted.
            httpx.HTTPStatusError: On other non-retryable HTTP errors.
        """
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(self._do_request, method, path, json=json, params=params)

    def _do_request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Execute a single request (no retry)."""
        response = self._client.request(method, path, json=json, params=params)
        status = response.status_code

        if status == 429 or (
            status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise GitHubRateLimitError(
                f"Rate limited: HTTP {status} - {_error_message(response)}",
                retry_after=retry_after,
            )

        if status in _AUTH_ERROR_STATUS_CODES:
            raise GitHubAuthError(
                f"Authentication failed: HTTP {status} - {_error_message(response)}",
                status_code=status,
            )
        if status == 404:
            raise GitHubNotFoundError(
                f"Not found: {method} {path}", status_code=status
            )
        if status == 422:
            raise GitHubValidationError(
                f"Validation failed: {_error_message(response)}", status_code=status
            )

        response.raise_for_status()

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubResponseError(
                f"Invalid JSON from {method} {path}: {response.text[:200]}",
                status_code=status,
            ) from exc

    # -- branches -----------------------------------------------------------

    def get_branch(self, owner: str, repo: str, branch: str) -> dict:
        return self.request("GET", f"/repos/{owner}/{repo}/branches/{branch}")

    # -- git data: refs -----------------------------------------------------

    def get_ref(self, owner: str, repo: str, ref: str) -> dict:
        """Get a fully-qualified ref such as ``refs/heads/main``."""
        return self.request("GET", f"/repos/{owner}/{repo}/git/ref/{_strip_refs(ref)}")

    def create_ref(self, owner: str, repo: str, ref: str, sha: str) -> dict:
        return self.request(
            "POST", f"/repos/{owner}/{repo}/git/refs", json={"ref": ref, "sha": sha}
        )

    def update_ref(self, owner: str, repo: str, ref: str, sha: str, *, force: bool = False) -> dict:
        return self.request(
            "PATCH",
            f"/repos/{owner}/{repo}/git/refs/{_strip_refs(ref)}",
            json={"sha": sha, "force": force},
        )

    # -- git data: objects --------------------------------------------------

    def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        return self.request("GET", f"/repos/{owner}/{repo}/git/commits/{sha}")

    def get_tree(self, owner: str, repo: str, sha: str) -> dict:
        data = self.request("GET", f"/repos/{owner}/{repo}/git/trees/{sha}")
        if data.get("truncated"):
            # only happens for recursive listings, which are never requested
            logger.warning("Tree %s listing was truncated by the API", sha)
        return data

    def create_blob(self, owner: str, repo: str, content: bytes) -> str:
        data = self.request(
            "POST",
            f"/repos/{owner}/{repo}/git/blobs",
            json={
                "content": base64.b64encode(content).decode("ascii"),
                "encoding": "base64",
            },
        )
        return _require_sha(data, "blob")

    def create_tree(self, owner: str, repo: str, tree: list[dict]) -> str:
        data = self.request(
            "POST", f"/repos/{owner}/{repo}/git/trees", json={"tree": tree}
        )
        return _require_sha(data, "tree")

    def create_commit(self, owner: str, repo: str, payload: dict) -> str:
        data = self.request(
            "POST", f"/repos/{owner}/{repo}/git/commits", json=payload
        )
        return _require_sha(data, "commit")

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _strip_refs(ref: str) -> str:
    return ref[len("refs/"):] if ref.startswith("refs/") else ref


def _require_sha(data: object, kind: str) -> str:
    try:
        return data["sha"]  # type: ignore[index]
    except (KeyError, TypeError) as exc:
        raise GitHubResponseError(
            f"Cannot read {kind} sha from response: {data!r}"
        ) from exc
