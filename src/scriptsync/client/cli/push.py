"""Push command for scriptsync CLI.

Commands:
- push: Replace the remote project files with the local ones
"""

from __future__ import annotations

import json
import sys
import threading
import time
from collections.abc import Sequence

import click

from scriptsync.client.cli.config import CLI_ERRORS, CliContext, fail
from scriptsync.client.sync.engine import ProjectFiles
from scriptsync.client.sync.types import PushError
from scriptsync.core.types import FileType


def _manifest_changed(project: ProjectFiles, paths: Sequence[str]) -> bool:
    extensions = project.config.file_extensions
    for path in paths:
        resolved = extensions.split(path)
        if resolved is not None and resolved[1] is FileType.CONFIG:
            return True
    return False


def _confirm_manifest_update() -> bool:
    try:
        return click.confirm(
            "Manifest file has been updated. Do you want to push and overwrite?",
            default=False,
        )
    except click.Abort:
        return False


def _report_push_error(error: PushError) -> None:
    click.echo(f"Error: {error}", err=True)
    if error.snippet:
        click.echo(error.snippet, err=True)
    details = getattr(error.cause, "details", None)
    if details:
        for detail in details:
            click.echo(f"  {detail}", err=True)


@click.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite the remote manifest without asking.")
@click.option("--watch", "-w", is_flag=True, help="Watch for local changes and push them.")
@click.option("--json", "as_json", is_flag=True, help="Print pushed paths as JSON.")
@click.pass_obj
def push(ctx: CliContext, force: bool, watch: bool, as_json: bool) -> None:
    """Update the remote project with the local files.

    The whole remote file set is replaced. Nothing is sent when the
    remote project already matches.
    """
    state = {"force": force}

    def run_push(paths: Sequence[str]) -> bool:
        """Push once; returns False if the user declined a manifest update."""
        if _manifest_changed(project, paths) and not state["force"]:
            state["force"] = _confirm_manifest_update()
            if not state["force"]:
                if not as_json:
                    click.echo("Skipping push.")
                return False

        pushed = project.push()
        if as_json:
            click.echo(json.dumps([f.local_path for f in pushed], indent=2))
        else:
            noun = "file" if len(pushed) == 1 else "files"
            click.echo(f"Pushed {len(pushed)} {noun} at {time.strftime('%H:%M:%S')}.")
            for f in pushed:
                click.echo(f"└─ {f.local_path}")

        for missing in project.missing_from_push_order(pushed):
            click.echo(f"Warning: filePushOrder entry matched no file: {missing}", err=True)
        return True
    try:
        project = ctx.project_files()
    except CLI_ERRORS as e:
        fail(e)

    with project:
        try:
            diff = project.diff_remote()
            if diff:
                run_push([f.local_path for f in diff.changed])
            elif as_json:
                click.echo(json.dumps([], indent=2))
            else:
                click.echo("Script is already up to date.")
        except PushError as e:
            _report_push_error(e)
            sys.exit(1)
        except CLI_ERRORS as e:
            fail(e)

        if not watch:
            return

        declined = threading.Event()

        def on_change(paths: list[str]) -> None:
            try:
                if not run_push(paths):
                    declined.set()
            except PushError as e:
                _report_push_error(e)
            except CLI_ERRORS as e:
                click.echo(f"Error: {e}", err=True)

        click.echo("Waiting for changes... (Ctrl+C to stop)")
        with project.watch(on_change):
            try:
                while not declined.wait(timeout=1.0):
                    pass
            except KeyboardInterrupt:
                click.echo("\nStopping...")
