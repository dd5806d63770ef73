"""gitbatch CLI -- push local files to a GitHub branch as batched commits.

This module is NEVER imported from gitbatch/__init__.py.
It is only loaded via the ``gitbatch`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from gitbatch.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from gitbatch.github.client import GitHubClient


@click.group()
@click.option(
    "--token",
    default=None,
    envvar="GITBATCH_GITHUB_TOKEN",
    help="GitHub API token (falls back to GITHUB_TOKEN).",
)
@click.option(
    "--api-url",
    default=None,
    envvar="GITBATCH_API_URL",
    help="GitHub API base URL.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, token: str | None, api_url: str | None, verbose: int) -> None:
    """gitbatch: batched multi-file commits against a GitHub branch."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["token"] = token
    ctx.obj["api_url"] = api_url


def _get_client(ctx: click.Context) -> GitHubClient:
    """Build a GitHubClient from Click context."""
    from gitbatch.github.client import GitHubClient

    return GitHubClient(token=ctx.obj["token"], base_url=ctx.obj["api_url"])


@contextmanager
def _client_session(ctx: click.Context) -> Iterator[tuple[GitHubClient, Console]]:
    """Context manager that opens a client, yields (client, console), and handles cleanup.

    Ensures the client is closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        client = _get_client(ctx)
        try:
            yield client, console
        finally:
            client.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from gitbatch.cli.commands.push import push  # noqa: E402
from gitbatch.cli.commands.show import show  # noqa: E402

cli.add_command(push)
cli.add_command(show)
