"""Command-line interface for quickcluster-wizard."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from quickcluster_wizard.catalog import Catalog, CatalogLoader, lint_catalog
from quickcluster_wizard.cli.formatting import (
    create_settings_table,
    format_error,
    format_success,
    format_warning,
    parse_assignments,
)
from quickcluster_wizard.config import (
    clear_settings,
    get_settings_path,
    load_settings,
    save_settings,
)
from quickcluster_wizard.constants import KEY_EXPIRATION, KEY_NAME
from quickcluster_wizard.errors import CatalogError, NavigationError, WizardError
from quickcluster_wizard.review import format_messages, show_review
from quickcluster_wizard.schemas.cluster import ClusterRequest
from quickcluster_wizard.session import WizardSession
from quickcluster_wizard.types import MalformedConditionPolicy

console = Console()
err_console = Console(stderr=True)


def _load_catalog(path: Path, strict: bool) -> Catalog:
    loader = CatalogLoader(strict_mode=strict)
    try:
        if path.is_dir():
            return loader.parse_directory(path)
        return loader.parse_file(path)
    except (CatalogError, FileNotFoundError) as e:
        raise click.ClickException(str(e))


def _coerce(value: str) -> Any:
    """Read a command-line value the way a form would deliver it."""
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


@click.group()
@click.version_option(package_name="quickcluster-wizard")
def cli() -> None:
    """Plan QuickCluster requests against product schemas and region quotas.

    Quick Start:

      1. Check a product catalog for authoring mistakes:
         $ qcw validate catalog.yml

      2. Dry-run a cluster request through every wizard step:
         $ qcw plan catalog.yml -p 1 -r 1 -n my-cluster --set num_web_nodes=3

    For more information on a specific command:
      $ qcw COMMAND --help
    """
    pass


@cli.command()
@click.argument(
    "catalog_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on invalid entries and on warnings",
)
def validate(catalog_path: Path, strict: bool) -> None:
    """Validate a product catalog file or directory.

    Reports conditions without an operator, conditions reading undefined
    variables and node counts whose flavor cannot be resolved.
    """
    catalog = _load_catalog(catalog_path, strict)
    report = lint_catalog(catalog)

    if report.issues:
        console.print(report.format_report())

    if report.has_errors() or (strict and report.has_warnings()):
        raise click.ClickException("Catalog validation failed")

    console.print(
        format_success(
            "Catalog is valid",
            f"{len(catalog.products)} product(s), {len(catalog.regions)} region(s)",
        )
    )


@cli.command()
@click.argument(
    "catalog_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option("--product", "-p", "product_id", type=int, required=True, help="Product id")
@click.option("--region", "-r", "region_id", type=int, required=True, help="Region id")
@click.option("--name", "-n", required=True, help="Cluster name")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Parameter value (repeatable); unset parameters keep their defaults",
)
@click.option(
    "--expires-in",
    type=int,
    default=None,
    help="Reservation length in days",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the cluster request as JSON",
)
def plan(
    catalog_path: Path,
    product_id: int,
    region_id: int,
    name: str,
    assignments: tuple[str, ...],
    expires_in: int | None,
    as_json: bool,
) -> None:
    """Walk every wizard step and print the resulting cluster request.

    Exits with an error listing the blocking problems when a step gate
    refuses to advance.
    """
    try:
        overrides = {k: _coerce(v) for k, v in parse_assignments(assignments).items()}
    except ValueError as e:
        raise click.UsageError(str(e))

    catalog = _load_catalog(catalog_path, strict=False)
    session = WizardSession.start(catalog.products, catalog.regions, load_settings())

    try:
        session = session.select_product(product_id).next()
        session = session.select_region(region_id).next()

        product = session.product
        if product is None:
            raise click.ClickException(f"Unknown product id: {product_id}")
        advanced_vars = {p.variable for p in product.step_parameters(advanced=True)}

        basic = product.defaults(advanced=False)
        basic.update({k: v for k, v in overrides.items() if k not in advanced_vars})
        basic[KEY_NAME] = name
        if expires_in is not None:
            basic[KEY_EXPIRATION] = expires_in
        session = session.submit(basic)
        session = session.next()

        advanced = product.defaults(advanced=True)
        advanced.update({k: v for k, v in overrides.items() if k in advanced_vars})
        session = session.submit(advanced)
        session = session.next()
    except NavigationError as e:
        if session.messages:
            err_console.print(format_messages(session.messages))
        raise click.ClickException(str(e))
    except WizardError as e:
        raise click.ClickException(str(e))

    if not as_json:
        show_review(session, console)

    submitted: list[ClusterRequest] = []
    try:
        session, request = session.finish(submitted.append)
    except WizardError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(request.to_payload(), indent=2))
    else:
        console.print(
            format_success(
                f"Cluster '{request.name}' is within quota",
                f"Expires {request.reservation_expiration.isoformat()}",
            )
        )


@cli.group()
def config() -> None:
    """Show or change engine settings."""
    pass


@config.command(name="show")
def config_show() -> None:
    """Show the effective settings."""
    settings = load_settings()
    console.print(create_settings_table(settings))
    console.print(f"[dim]{get_settings_path()}[/dim]")


@config.command(name="set-policy")
@click.argument(
    "policy",
    type=click.Choice([p.value for p in MalformedConditionPolicy], case_sensitive=False),
)
def config_set_policy(policy: str) -> None:
    """Set how conditions without an operator evaluate."""
    settings = load_settings()
    updated = settings.model_copy(
        update={"malformed_condition_policy": MalformedConditionPolicy(policy.lower())}
    )
    if not save_settings(updated):
        raise click.ClickException("Could not save settings")
    if updated.malformed_condition_policy == MalformedConditionPolicy.SATISFY:
        console.print(
            format_warning(
                "Malformed conditions now pass",
                "Requests violating a badly authored condition will not be blocked.",
            )
        )
    else:
        console.print(format_success(f"Malformed condition policy set to '{policy}'"))


@config.command(name="reset")
def config_reset() -> None:
    """Restore default settings."""
    clear_settings()
    console.print(format_success("Settings reset to defaults"))


def main() -> None:
    try:
        cli()
    except KeyboardInterrupt:
        err_console.print(format_error("Interrupted"))
        raise SystemExit(130)


if __name__ == "__main__":
    main()
