"""Command line entry point: resolve unit archives and show the result."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.table import Table

from .console import console
from .error_format import escape_markup
from .error_format import format_error_message
from .errors import ResolverError
from .identifiers import IdentifierSource
from .logging_setup import init_json_logging
from .repository import ExternalRepository
from .repository import RepositoryRegistry
from .resource import identity_capability
from .settings import ResolverContext
from .settings import load_settings
from .unit import UnitResource


def _resolve(archive: str, data_dir: Path | None, max_depth: int | None) -> UnitResource:
    try:
        settings = load_settings(data_dir=data_dir, max_depth=max_depth)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid settings: {escape_markup(e)}")
        sys.exit(1)

    if settings.log_path:
        init_json_logging(settings.log_path, settings.log_level)

    context = ResolverContext(
        settings=settings,
        identifiers=IdentifierSource.continuing(settings.data_dir),
        external_repository=ExternalRepository(RepositoryRegistry.from_entry_points()),
    )
    try:
        return UnitResource(archive, context=context)
    except (ResolverError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e))}")
        sys.exit(1)


def _describe_resource(resource) -> dict[str, Any]:
    capability = identity_capability(resource)
    if capability is None:
        return {"name": repr(resource)}
    attributes = capability.attributes
    return {
        "name": attributes.get("osgi.identity"),
        "version": str(attributes.get("version", "")),
        "type": attributes.get("type"),
    }


def unit_to_dict(unit: UnitResource) -> dict[str, Any]:
    """JSON-ready summary of a resolved unit."""
    return {
        "id": unit.id,
        "location": str(unit.location),
        "directory": str(unit.directory),
        "manifest": unit.manifest.to_dict(),
        "deployment_manifest": unit.deployment_manifest.to_dict() if unit.deployment_manifest else None,
        "resources": [_describe_resource(r) for r in unit.resources],
        "requirements": [{"namespace": r.namespace, "directives": dict(r.directives)} for r in unit.requirements()],
    }


@click.group(invoke_without_command=True)
@click.version_option(package_name="esa-resolver")
@click.pass_context
def cli(ctx: click.Context):
    """Resolve unit archives into manifests and dependency graphs."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("archive")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Working directory root")
@click.option("--max-depth", type=int, help="Maximum archive nesting depth")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def resolve(archive: str, data_dir: Path | None, max_depth: int | None, as_json: bool):
    """Resolve ARCHIVE and summarize the result."""
    unit = _resolve(archive, data_dir, max_depth)

    if as_json:
        click.echo(json.dumps(unit_to_dict(unit), indent=2))
        return

    console.print(f"[bold]{escape_markup(unit.symbolic_name)}[/bold] {unit.version} [dim]({unit.type})[/dim]")
    console.print(f"[dim]{escape_markup(unit.location.value)}[/dim]")
    console.print(f"[dim]id {unit.id} in {escape_markup(unit.directory)}[/dim]\n")

    headers = Table(title="Manifest", show_header=True, header_style="bold cyan")
    headers.add_column("Header", style="green")
    headers.add_column("Value")
    for name, value in unit.manifest.to_dict().items():
        headers.add_row(name, escape_markup(value))
    console.print(headers)

    if unit.resources:
        resources = Table(title="Resources", show_header=True, header_style="bold cyan")
        resources.add_column("Name", style="green")
        resources.add_column("Version", style="yellow")
        resources.add_column("Type")
        for description in (_describe_resource(r) for r in unit.resources):
            resources.add_row(
                escape_markup(description["name"]), description.get("version", ""), description.get("type") or ""
            )
        console.print(resources)
    else:
        console.print("[yellow]No resources discovered.[/yellow]")

    requirements = unit.requirements()
    if requirements:
        table = Table(title="Requirements", show_header=True, header_style="bold cyan")
        table.add_column("Namespace", style="green")
        table.add_column("Filter")
        table.add_column("Resolution", style="dim")
        for requirement in requirements:
            table.add_row(
                requirement.namespace,
                escape_markup(requirement.directives.get("filter", "")),
                "optional" if requirement.is_optional() else "mandatory",
            )
        console.print(table)


@cli.command()
@click.argument("archive")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), help="Working directory root")
def manifest(archive: str, data_dir: Path | None):
    """Print the finalized manifest of ARCHIVE."""
    unit = _resolve(archive, data_dir, None)
    click.echo(unit.manifest.to_text(), nl=False)


def main():
    cli()


if __name__ == "__main__":
    main()
