"""Listing commands for scriptsync CLI.

Commands:
- list-versions: List versions of the project
- list-deployments: List deployments of the project
- list-scripts: List script projects visible to the user
"""

from __future__ import annotations

import json
import warnings
from collections.abc import Callable
from typing import Any, TypeVar

import click

from scriptsync.client.cli.config import CLI_ERRORS, CliContext, fail
from scriptsync.client.sync.pagination import DEFAULT_MAX_PAGES
from scriptsync.client.sync.types import PagedResults, PartialResultsWarning

T = TypeVar("T")

SCRIPT_EDIT_URL = "https://script.google.com/d/{id}/edit"

max_pages_option = click.option(
    "--max-pages",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_PAGES,
    show_default=True,
    help="Maximum number of pages to fetch.",
)


def _fetch(list_call: Callable[..., PagedResults[T]], *args: Any, **kwargs: Any) -> PagedResults[T]:
    """Run a listing call, reporting truncation once on stderr."""
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", PartialResultsWarning)
            results = list_call(*args, **kwargs)
    except CLI_ERRORS as e:
        fail(e)
    if results.partial:
        click.echo(
            f"Warning: showing the first {len(results.results)} results; more may exist.",
            err=True,
        )
    return results


def _ellipsize(text: str, width: int) -> str:
    if len(text) <= width:
        return text.ljust(width)
    return text[: width - 3] + "..."


@click.command("list-versions")
@max_pages_option
@click.pass_obj
def list_versions(ctx: CliContext, max_pages: int) -> None:
    """List versions of the project, newest first."""
    try:
        script_id = ctx.load_project().require_script_id()
        client = ctx.make_client()
    except CLI_ERRORS as e:
        fail(e)

    with client:
        versions = _fetch(client.list_versions, script_id, max_pages=max_pages)

    if not versions.results:
        click.echo("No deployed versions of script.")
        return

    count = len(versions.results)
    click.echo(f"Found {count} {'version' if count == 1 else 'versions'}.")
    for version in reversed(versions.results):
        click.echo(f"{version.version_number} - {version.description or 'No description'}")


@click.command("list-deployments")
@max_pages_option
@click.pass_obj
def list_deployments(ctx: CliContext, max_pages: int) -> None:
    """List deployments of the project."""
    try:
        script_id = ctx.load_project().require_script_id()
        client = ctx.make_client()
    except CLI_ERRORS as e:
        fail(e)

    with client:
        deployments = _fetch(client.list_deployments, script_id, max_pages=max_pages)

    if not deployments.results:
        click.echo("No deployments.")
        return

    count = len(deployments.results)
    click.echo(f"{count} {'Deployment' if count == 1 else 'Deployments'}.")
    for deployment in deployments.results:
        version = f"@{deployment.version_number}" if deployment.version_number else "@HEAD"
        description = f" - {deployment.description}" if deployment.description else ""
        click.echo(f"- {deployment.deployment_id} {version}{description}")


@click.command("list-scripts")
@max_pages_option
@click.option("--no-shorten", is_flag=True, help="Do not shorten long names.")
@click.option("--json", "as_json", is_flag=True, help="Print scripts as JSON.")
@click.pass_obj
def list_scripts(ctx: CliContext, max_pages: int, no_shorten: bool, as_json: bool) -> None:
    """List script projects you can access."""
    try:
        client = ctx.make_client()
    except CLI_ERRORS as e:
        fail(e)

    with client:
        scripts = _fetch(client.list_scripts, max_pages=max_pages)

    if as_json:
        data = [{"id": s.id, "name": s.name} for s in scripts.results]
        click.echo(json.dumps(data, indent=2))
        return

    if not scripts.results:
        click.echo("No script files found.")
        return

    count = len(scripts.results)
    click.echo(f"Found {count} {'script' if count == 1 else 'scripts'}.")
    for script in scripts.results:
        name = script.name if no_shorten else _ellipsize(script.name, 20)
        click.echo(f"{name} - {SCRIPT_EDIT_URL.format(id=script.id)}")
