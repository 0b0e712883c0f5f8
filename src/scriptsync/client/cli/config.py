"""Shared context for scriptsync CLI commands.

This module provides the objects every command builds on: the loaded
project, its ignore rules, the API client and the error reporting helper.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click

from scriptsync.client.api import APIError, ScriptClient
from scriptsync.client.project import ProjectConfig, load_project
from scriptsync.client.sync.engine import ProjectFiles
from scriptsync.client.sync.ignore import IgnoreRuleSet, load_ignore_rules
from scriptsync.client.sync.types import SyncError
from scriptsync.core.config import ApiConfig, CredentialsError, load_credentials

# Errors reported as "Error: ..." with exit status 1
CLI_ERRORS = (SyncError, APIError, CredentialsError)


@dataclass
class CliContext:
    """Global options, shared by all commands through click's context object."""

    project_path: Path | None = None
    ignore_file: Path | None = None
    token: str | None = None
    verbose: bool = False

    def load_project(self) -> ProjectConfig:
        """Load the project config found from the working directory."""
        return load_project(Path.cwd(), self.project_path)

    def load_rules(self, config: ProjectConfig) -> IgnoreRuleSet:
        """Load ignore rules for the project."""
        return load_ignore_rules(self.ignore_file, config.project_root)

    def make_client(self) -> ScriptClient:
        """Create an API client from the resolved credentials."""
        return ScriptClient(ApiConfig(credentials=load_credentials(self.token)))

    def project_files(self, with_client: bool = True) -> ProjectFiles:
        """Build the sync engine for the current project."""
        config = self.load_project()
        rules = self.load_rules(config)
        client = self.make_client() if with_client else None
        return ProjectFiles(config, rules, client)


def setup_logging(verbose: bool) -> None:
    """Send package logs to stderr.

    Args:
        verbose: Show debug messages instead of warnings only.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    package_logger = logging.getLogger("scriptsync")
    for existing in package_logger.handlers[:]:
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def fail(error: Exception | str) -> NoReturn:
    """Report an error and exit with status 1."""
    click.echo(f"Error: {error}", err=True)
    details = getattr(error, "details", None)
    if details:
        for detail in details:
            click.echo(f"  {detail}", err=True)
    sys.exit(1)
