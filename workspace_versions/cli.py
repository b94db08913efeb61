"""CLI entry point for workspace-versions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from workspace_versions.errors import WorkspaceVersionsError
from workspace_versions.models import DependencyReference
from workspace_versions.pipeline import (
    align_dependency,
    check_manifests,
    discover_packages,
    load_workspace_conventions,
    run_script,
    upgrade_dependency,
)


@contextmanager
def _errors_as_click() -> Iterator[None]:
    """Turn library errors into a one-line error and exit status 1."""
    try:
        yield
    except WorkspaceVersionsError as exc:
        raise click.ClickException(str(exc)) from exc


def _summarize(applied: list[DependencyReference]) -> None:
    if not applied:
        click.echo("\nNothing to update.")
        return
    click.echo(f"\n✓ Updated {len(applied)} dependents")


@click.group()
@click.version_option(package_name="workspace-versions")
def cli() -> None:
    """Keep package versions consistent across a uv workspace."""


@cli.command()
def check() -> None:
    """Validate every package manifest against the workspace conventions."""
    with _errors_as_click():
        check_manifests()


@cli.command("run")
@click.argument("script")
def run_command(script: str) -> None:
    """Run SCRIPT in every package, dependencies first."""
    with _errors_as_click():
        run_script(discover_packages(), script)


@cli.command()
@click.argument("name")
@click.option(
    "--to",
    "version",
    default=None,
    help="Version to upgrade to. (default: the package's own version)",
)
@click.option(
    "--keep-going",
    is_flag=True,
    help="Skip dependents whose upgrade is aborted instead of stopping.",
)
def upgrade(name: str, version: str | None, keep_going: bool) -> None:
    """Upgrade dependency NAME in every package that declares it."""
    with _errors_as_click():
        conventions = load_workspace_conventions()
        packages = discover_packages(conventions)
        applied = upgrade_dependency(
            packages, name, version, keep_going=keep_going, conventions=conventions
        )
    _summarize(applied)


@cli.command()
@click.argument("name")
@click.option(
    "--keep-going",
    is_flag=True,
    help="Skip dependents whose upgrade is aborted instead of stopping.",
)
def align(name: str, keep_going: bool) -> None:
    """Move every dependent of NAME to the largest version in use."""
    with _errors_as_click():
        conventions = load_workspace_conventions()
        packages = discover_packages(conventions)
        applied = align_dependency(
            packages, name, keep_going=keep_going, conventions=conventions
        )
    _summarize(applied)
