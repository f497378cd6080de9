from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import uvicorn

from bulwark.access.policy import AccessPolicy
from bulwark.access.scope import ScopeResolver
from bulwark.config import settings
from bulwark.domain.models import ROLE_SCOPE_LABELS, Role
from bulwark.exceptions import BulwarkError
from bulwark.org.loader import load_org_tree
from bulwark.org.tree import OrgTree

cli = typer.Typer(help="Bulwark CLI (organization scope and access checks)")


def _load_tree(units_file: Optional[Path]) -> OrgTree:
    try:
        return load_org_tree(units_file or settings.paths.org_units_path, strict=settings.access.strict_tree)
    except BulwarkError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)


def _print_branch(tree: OrgTree, unit_id: str, depth: int) -> None:
    unit = tree.get_unit_by_id(unit_id)
    if unit is None:
        return
    label = f" ({unit.level_label})" if unit.level_label else ""
    typer.echo(f"{'  ' * depth}{unit.name} [{unit.id}]{label}")
    for child in tree.get_child_units(unit.id):
        _print_branch(tree, child.id, depth + 1)


@cli.command()
def version() -> None:
    """Print runtime version."""
    typer.echo(f"Bulwark {settings.app.version}")


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload for local development"),
) -> None:
    """Run the Bulwark API server."""
    uvicorn.run(
        "bulwark.api.main:app",
        host=host,
        port=port,
        reload=reload,
        app_dir="src",
    )


@cli.command()
def tree(
    units_file: Optional[Path] = typer.Option(None, "--units-file", help="YAML file with a `units` list"),
) -> None:
    """Print the organization tree."""
    org = _load_tree(units_file)
    for top in org.get_child_units(None):
        _print_branch(org, top.id, 0)


@cli.command()
def scope(
    role: str = typer.Option(..., help="ROLE_HQ | ROLE_DIV | ROLE_BN"),
    unit: str = typer.Option(..., help="Home unit id"),
    units_file: Optional[Path] = typer.Option(None, "--units-file", help="YAML file with a `units` list"),
) -> None:
    """List the units a role may see from its home unit."""
    org = _load_tree(units_file)
    resolver = ScopeResolver(org)
    resolved = Role.coerce(role)
    units = resolver.get_accessible_units(resolved, unit)
    if not units:
        typer.echo("No accessible units.")
        raise typer.Exit(code=1)
    typer.echo(f"{resolved.value} ({ROLE_SCOPE_LABELS[resolved]}) from {unit}: {len(units)} units")
    for record in units:
        typer.echo(f"- {record.id}\t{org.get_unit_full_name(record.id, separator=settings.access.path_separator)}")


@cli.command("check-page")
def check_page(
    path: str = typer.Argument(..., help="Route path, e.g. /admin/users"),
    role: str = typer.Option(..., help="ROLE_HQ | ROLE_DIV | ROLE_BN"),
) -> None:
    """Check whether a role may open a route."""
    policy = AccessPolicy.load(
        settings.paths.access_policy_path,
        default_allow_unmapped=settings.access.default_allow_unmapped,
    )
    decision = policy.resolve_route(role, path)
    matched = policy.match_page_key(path) or "(unmapped)"
    if decision.allowed:
        typer.echo(f"allowed {path} via {matched}")
        return
    typer.echo(f"denied {path} via {matched}, redirect to {decision.redirect_to}")
    raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
