"""gitbatch show -- list the files at a branch or commit."""

from __future__ import annotations

import re

import click

_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


@click.command()
@click.argument("repo")
@click.argument("ref")
@click.pass_context
def show(ctx: click.Context, repo: str, ref: str) -> None:
    """List every file in the tree of REF (branch name or commit SHA) in REPO."""
    from gitbatch.cli import _client_session
    from gitbatch.cli.formatting import format_tree
    from gitbatch.engine.tree import read_tree_recursive
    from gitbatch.models.branch import RepoDomain
    from gitbatch.operations.branch import get_branch_head
    from gitbatch.storage.github import GitHubObjectStore

    try:
        origin = RepoDomain.parse(repo)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None

    with _client_session(ctx) as (client, console):
        sha = ref if _SHA_RE.match(ref) else get_branch_head(client, origin, ref)
        store = GitHubObjectStore(client, origin)
        entries = read_tree_recursive(store, store.get_commit_tree(sha))
        console.print(f"[yellow]commit {sha}[/yellow]")
        format_tree(entries, console)
