"""gitbatch push -- commit local files onto a remote branch."""

from __future__ import annotations

import os
from pathlib import Path

import click

from gitbatch.models.changes import FileData, FileMode


def _file_data(path: Path) -> FileData:
    if path.is_symlink():
        return FileData(os.readlink(path), FileMode.SYMLINK)
    mode = FileMode.EXECUTABLE if os.access(path, os.X_OK) else FileMode.REGULAR
    return FileData(path.read_bytes(), mode)


def _repo_path(root: Path, path: Path, raw: str) -> str:
    try:
        rel = path.relative_to(root)
    except ValueError:
        rel = None
    if rel is None or ".." in rel.parts:
        raise click.BadParameter(f"Path is outside --root: {raw}", param_hint="PATHS")
    return rel.as_posix()


def collect_changes(root: Path, paths: tuple[str, ...], deletes: tuple[str, ...]) -> dict[str, FileData]:
    """Read ``paths`` (files or directories, relative to ``root``) into a change set.

    Directories are walked recursively, skipping ``.git``. ``deletes`` are
    added last as deletions.
    """
    changes: dict[str, FileData] = {}
    for raw in paths:
        target = root / raw
        if target.is_dir() and not target.is_symlink():
            for file in sorted(target.rglob("*")):
                rel = _repo_path(root, file, raw)
                if ".git" in rel.split("/") or (file.is_dir() and not file.is_symlink()):
                    continue
                changes[rel] = _file_data(file)
        elif target.exists() or target.is_symlink():
            changes[_repo_path(root, target, raw)] = _file_data(target)
        else:
            raise click.BadParameter(f"No such file or directory: {raw}", param_hint="PATHS")
    for raw in deletes:
        changes[Path(raw).as_posix()] = FileData(None)
    return changes


@click.command()
@click.argument("repo")
@click.argument("branch_name", metavar="BRANCH")
@click.argument("paths", nargs=-1)
@click.option("-m", "--message", required=True, help="Commit message used for every commit.")
@click.option("--root", default=".", type=click.Path(exists=True, file_okay=False), help="Directory paths are relative to.")
@click.option("--delete", "deletes", multiple=True, help="Repository path to delete (repeatable).")
@click.option("--base", default="main", show_default=True, help="Branch to base new commits on.")
@click.option("--upstream", default=None, help="OWNER/REPO to read the base branch from (default: REPO).")
@click.option("--force", is_flag=True, help="Overwrite the branch even if not a fast-forward.")
@click.option("--files-per-commit", default=100, show_default=True, type=click.IntRange(min=1), help="Maximum files per commit.")
@click.option("--author-name", default=None, help="Commit author name.")
@click.option("--author-email", default=None, help="Commit author email.")
@click.pass_context
def push(
    ctx: click.Context,
    repo: str,
    branch_name: str,
    paths: tuple[str, ...],
    message: str,
    root: str,
    deletes: tuple[str, ...],
    base: str,
    upstream: str | None,
    force: bool,
    files_per_commit: int,
    author_name: str | None,
    author_email: str | None,
) -> None:
    """Commit PATHS onto BRANCH of REPO (OWNER/REPO), creating BRANCH if needed."""
    from gitbatch.cli import _client_session
    from gitbatch.cli.formatting import format_push_result
    from gitbatch.engine.push import commit_and_push
    from gitbatch.models.branch import BranchDomain, RepoDomain
    from gitbatch.models.commit import UserData
    from gitbatch.models.config import PushOptions
    from gitbatch.operations.branch import branch as ensure_branch
    from gitbatch.storage.github import GitHubObjectStore

    if not paths and not deletes:
        raise click.UsageError("Nothing to push: give PATHS and/or --delete.")
    if bool(author_name) != bool(author_email):
        raise click.UsageError("--author-name and --author-email go together.")

    try:
        origin = RepoDomain.parse(repo)
        upstream_domain = RepoDomain.parse(upstream) if upstream else origin
    except ValueError as e:
        raise click.BadParameter(str(e)) from None
    changes = collect_changes(Path(root), paths, deletes)

    author = UserData(name=author_name, email=author_email) if author_name else None
    options = PushOptions(files_per_commit=files_per_commit, author=author)

    with _client_session(ctx) as (client, console):
        base_sha = ensure_branch(client, origin, upstream_domain, branch_name, base)
        store = GitHubObjectStore(client, origin)
        result = commit_and_push(
            store,
            base_sha,
            changes,
            BranchDomain(owner=origin.owner, repo=origin.repo, branch=branch_name),
            message,
            force,
            options,
        )
        format_push_result(result, console)
