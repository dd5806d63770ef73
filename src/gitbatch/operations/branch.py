"""Branch operations for gitbatch.

Resolve a base branch head, check for and create the target branch.
Composes GitHubClient calls into the step that precedes a push.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from gitbatch.exceptions import BranchNotFoundError, InvalidBranchNameError
from gitbatch.github.errors import GitHubNotFoundError, GitHubResponseError
from gitbatch.models.branch import REF_PREFIX

if TYPE_CHECKING:
    from gitbatch.github.client import GitHubClient
    from gitbatch.models.branch import RepoDomain

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_BRANCH = "main"

# Characters forbidden in branch names (git-style)
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\]")


def create_ref(branch_name: str) -> str:
    """Fully-qualified ref name for a branch."""
    return REF_PREFIX + branch_name


def validate_branch_name(name: str) -> None:
    """Validate a branch name against git-style naming rules.

    Raises InvalidBranchNameError on violation.
    """
    if not name:
        raise InvalidBranchNameError(name, "branch name cannot be empty")

    if ".." in name:
        raise InvalidBranchNameError(name, "branch name cannot contain '..'")

    if name.endswith(".lock"):
        raise InvalidBranchNameError(name, "branch name cannot end with '.lock'")

    if name.startswith(".") or name.endswith("."):
        raise InvalidBranchNameError(name, "branch name cannot start or end with '.'")

    if "@{" in name:
        raise InvalidBranchNameError(name, "branch name cannot contain '@{'")

    if _FORBIDDEN_CHARS.search(name):
        raise InvalidBranchNameError(
            name, "branch name contains forbidden characters (whitespace, ~, ^, :, ?, *, [, \\)"
        )

    if name.startswith("/") or name.endswith("/") or "//" in name:
        raise InvalidBranchNameError(name, "branch name has invalid slash usage")


def _head_sha(data: dict) -> str:
    commit = data.get("commit") or {}
    # GitHub reports the head as "sha", Gitea as "id"
    sha = commit.get("sha") or commit.get("id")
    if not sha:
        raise GitHubResponseError(f"Branch response has no head commit: {data!r}")
    return sha


def get_branch_head(client: GitHubClient, origin: RepoDomain, branch: str) -> str:
    """Return the head commit SHA of ``branch``.

    Raises:
        BranchNotFoundError: If the branch does not exist.
    """
    try:
        data = client.get_branch(origin.owner, origin.repo, branch)
    except GitHubNotFoundError:
        raise BranchNotFoundError(branch, origin.full_name) from None
    sha = _head_sha(data)
    logger.info('Successfully found branch HEAD sha "%s".', sha)
    return sha


def exists_branch_with_name(client: GitHubClient, remote: RepoDomain, name: str) -> bool:
    """True if ``remote`` has a branch called ``name``. Other errors propagate."""
    try:
        data = client.get_branch(remote.owner, remote.repo, name)
    except GitHubNotFoundError:
        return False
    return bool(_head_sha(data))


def create_branch(
    client: GitHubClient,
    remote: RepoDomain,
    name: str,
    base_sha: str,
    duplicate: bool,
) -> None:
    """Create ``name`` on ``remote`` at ``base_sha`` unless it already exists.

    Args:
        client: Authenticated GitHub client.
        remote: Repository to create the branch in.
        name: Branch name (validated against naming rules).
        base_sha: Commit the new branch points to.
        duplicate: Whether the branch already exists; creation is skipped if so.
    """
    if duplicate:
        logger.info("Skipping branch creation step...")
        return

    validate_branch_name(name)
    data = client.create_ref(remote.owner, remote.repo, create_ref(name), base_sha)
    url = (data or {}).get("object", {}).get("url", base_sha)
    logger.info("Successfully created branch at %s", url)


def branch(
    client: GitHubClient,
    origin: RepoDomain,
    upstream: RepoDomain,
    name: str,
    base_branch: str = DEFAULT_PRIMARY_BRANCH,
) -> str:
    """Make sure ``name`` exists on ``origin`` and return the base SHA to commit on.

    The base head is read from ``upstream``'s ``base_branch``; for a
    same-repository workflow pass the same domain twice.

    Returns:
        The head SHA of ``base_branch``. Commits for the new branch are
        chained from it.

    Raises:
        BranchNotFoundError: If ``base_branch`` does not exist upstream.
        InvalidBranchNameError: If ``name`` is not a valid branch name.
    """
    try:
        base_sha = get_branch_head(client, upstream, base_branch)
        duplicate = exists_branch_with_name(client, origin, name)
        create_branch(client, origin, name, base_sha, duplicate)
        return base_sha
    except Exception:
        logger.error("Error when creating branch")
        raise
