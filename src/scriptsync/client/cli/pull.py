"""Pull command for scriptsync CLI.

Commands:
- pull: Write the remote project files into the content directory
"""

from __future__ import annotations

import json

import click

from scriptsync.client.cli.config import CLI_ERRORS, CliContext, fail


@click.command()
@click.option("--version", "version_number", type=int, help="Version to pull (default: latest).")
@click.option(
    "--delete-unused",
    is_flag=True,
    help="Delete tracked local files that are not in the remote project.",
)
@click.option("--force", "-f", is_flag=True, help="Delete unused files without asking.")
@click.option("--json", "as_json", is_flag=True, help="Print pulled and deleted paths as JSON.")
@click.pass_obj
def pull(
    ctx: CliContext,
    version_number: int | None,
    delete_unused: bool,
    force: bool,
    as_json: bool,
) -> None:
    """Fetch the remote project files.

    Local files are overwritten. With --delete-unused, tracked files that
    the remote project no longer has are listed and deleted after
    confirmation (or right away with --force).
    """
    try:
        project = ctx.project_files()
    except CLI_ERRORS as e:
        fail(e)

    with project:
        try:
            result = project.pull(version_number, find_unused=delete_unused)
        except CLI_ERRORS as e:
            fail(e)

        if not as_json:
            noun = "file" if len(result.written) == 1 else "files"
            click.echo(f"Pulled {len(result.written)} {noun}.")
            for path in result.written:
                click.echo(f"└─ {path}")

        deleted: list[str] = []
        if result.prunable:
            if not as_json:
                click.echo("\nLocal files not in the remote project:")
                for path in result.prunable:
                    click.echo(f"  └─ {path}")

            confirmed = force
            if not confirmed and not as_json:
                confirmed = click.confirm("Delete these files?", default=False)
            if confirmed:
                deleted = project.prune(result.prunable)
                if not as_json:
                    click.echo(f"Deleted {len(deleted)} unused files.")

    if as_json:
        click.echo(json.dumps({"pulled": result.written, "deleted": deleted}, indent=2))
