"""Command-line interface for scriptsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- push: Replace the remote project files with the local ones
- pull: Fetch the remote project files
- status / show-file-status: List tracked and untracked local files
- list-versions: List project versions
- list-deployments: List project deployments
- list-scripts: List script projects you can access
"""

from __future__ import annotations

from pathlib import Path

import click

from scriptsync.client.cli.config import CliContext, setup_logging
from scriptsync.client.cli.listing import list_deployments, list_scripts, list_versions
from scriptsync.client.cli.pull import pull
from scriptsync.client.cli.push import push
from scriptsync.client.cli.status import status


@click.group()
@click.version_option(package_name="scriptsync")
@click.option(
    "--project",
    "project_path",
    type=click.Path(path_type=Path),
    help="Project config file, or the directory holding .scriptsync.json.",
)
@click.option(
    "--ignore-file",
    type=click.Path(path_type=Path),
    help="Ignore file to use instead of .scriptsyncignore.",
)
@click.option("--token", help="Access token for the remote API.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
@click.pass_context
def cli(
    ctx: click.Context,
    project_path: Path | None,
    ignore_file: Path | None,
    token: str | None,
    verbose: bool,
) -> None:
    """scriptsync - Sync local files with a remote script project."""
    setup_logging(verbose)
    options = ctx.ensure_object(CliContext)
    options.project_path = project_path
    options.ignore_file = ignore_file
    options.token = token
    options.verbose = verbose


# Sync commands
cli.add_command(push)
cli.add_command(pull)
cli.add_command(status)
cli.add_command(status, name="show-file-status")

# Listing commands
cli.add_command(list_versions)
cli.add_command(list_deployments)
cli.add_command(list_scripts)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "CliContext",
    "cli",
    "main",
]
