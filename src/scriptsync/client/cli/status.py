"""Status command for scriptsync CLI.

Commands:
- status (show-file-status): List tracked and untracked local files
"""

from __future__ import annotations

import json

import click

from scriptsync.client.cli.config import CLI_ERRORS, CliContext, fail


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the status as JSON.")
@click.pass_obj
def status(ctx: CliContext, as_json: bool) -> None:
    """List local files that will be pushed, and files that are ignored."""
    try:
        classification = ctx.project_files(with_client=False).classify()
    except CLI_ERRORS as e:
        fail(e)

    tracked = [f.local_path for f in classification.tracked]
    untracked = classification.untracked

    if as_json:
        click.echo(json.dumps({"filesToPush": tracked, "untrackedFiles": untracked}, indent=2))
        return

    click.echo("Files that will be pushed:")
    if tracked:
        for path in tracked:
            click.echo(f"  └─ {path}")
    else:
        click.echo("  No files are currently tracked to be pushed.")

    click.echo("\nFiles that are ignored (not pushed):")
    if untracked:
        for path in untracked:
            click.echo(f"  └─ {path}")
    else:
        click.echo("  No files are currently ignored.")
