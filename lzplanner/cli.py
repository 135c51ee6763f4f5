"""Command line interface for the landing zone planner."""

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .compiler.models import CompilationContext
from .compiler.pipeline import compile_all, enumerate_environments
from .config.loader import load_landing_zone_config, load_settings
from .config.models import LandingZoneConfig, OutputFormat, PlannerSettings
from .exceptions import LandingZonePlannerError
from .inventory.loader import InventoryLoader
from .logging_config import configure_logging
from .network.models import VpcTemplateConfig
from .report import build_failures_table, build_graph_table, build_summary_table, format_run_json
from .scope.directory import AccountDirectory, OrganizationDirectory
from .scope.models import DeploymentTargets
from .scope.resolver import (
    get_account_ids_from_deployment_target,
    get_regions_from_deployment_target,
    is_included,
)

console = Console()
err_console = Console(stderr=True)

config_dir_option = click.option(
    "--config-dir",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding the landing zone YAML documents",
)


def exit_with_error(message: str, code: int = 1) -> None:
    """Exit with error message."""
    console.print(f"[red]Error: {message}[/red]")
    sys.exit(code)


def _settings(ctx: click.Context, **overrides: Any) -> PlannerSettings:
    cli_args: Dict[str, Any] = {**ctx.obj["settings_overrides"], **overrides}
    return load_settings(ctx.obj["settings_path"], cli_args)


def _find_targets(config: LandingZoneConfig, item: str) -> Tuple[DeploymentTargets, Optional[list]]:
    """Deployment targets of a VPC template or custom stack, with its regions."""
    for vpc in config.network.vpcs:
        if vpc.name == item and isinstance(vpc, VpcTemplateConfig):
            return vpc.deployment_targets, [vpc.region]
    for stack in config.customizations.custom_stacks:
        if stack.name == item:
            return stack.deployment_targets, list(stack.regions)
    raise click.BadParameter(
        f"No VPC template or custom stack named '{item}'", param_hint="--item"
    )


@click.group()
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Planner settings file (default: ~/.config/landing-zone-planner/planner.yaml)",
)
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
@click.option("--json-logs/--console-logs", default=None, help="Log output format")
@click.pass_context
def cli(
    ctx: click.Context,
    settings_path: Optional[Path],
    log_level: Optional[str],
    json_logs: Optional[bool],
) -> None:
    """Compile landing zone configuration into ordered deployment units."""
    ctx.ensure_object(dict)
    ctx.obj["settings_path"] = settings_path
    ctx.obj["settings_overrides"] = {"log_level": log_level, "json_logs": json_logs}
    try:
        settings = load_settings(settings_path, ctx.obj["settings_overrides"])
    except LandingZonePlannerError as e:
        exit_with_error(str(e))
        return
    configure_logging(settings.log_level, settings.json_logs)


@cli.command(name="compile")
@config_dir_option
@click.option(
    "--inventory-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of <account_id>/<region> inventory snapshots",
)
@click.option("--account", "accounts", multiple=True, help="Account name to compile (repeatable)")
@click.option("--region", "regions", multiple=True, help="Region to compile (repeatable)")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=None,
    help="Output format",
)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Write JSON plan to file")
@click.option("--max-workers", type=int, default=None, help="Concurrent compilations")
@click.option("--unit-prefix", default=None, help="Prefix for generated unit names")
@click.option(
    "--incremental/--no-incremental",
    "incremental_units",
    default=None,
    help="Carve new resources into narrow units (default) or leave all to legacy units",
)
@click.pass_context
def compile_command(
    ctx: click.Context,
    config_dir: Path,
    inventory_dir: Optional[Path],
    accounts: Tuple[str, ...],
    regions: Tuple[str, ...],
    output_format: Optional[str],
    output: Optional[Path],
    max_workers: Optional[int],
    unit_prefix: Optional[str],
    incremental_units: Optional[bool],
) -> None:
    """Compile deployment units for every selected (account, region).

    Examples:

        lzp compile --config-dir ./config --inventory-dir ./inventory

        lzp compile --config-dir ./config --account Network --region us-east-1 --format json
    """
    try:
        settings = _settings(
            ctx,
            output_format=output_format,
            max_workers=max_workers,
            unit_prefix=unit_prefix,
            incremental_units=incremental_units,
            inventory_dir=str(inventory_dir) if inventory_dir else None,
        )
        context = CompilationContext(config=load_landing_zone_config(config_dir), settings=settings)
        environments = enumerate_environments(context, list(accounts), list(regions))
    except LandingZonePlannerError as e:
        exit_with_error(str(e))
        return

    # stdout carries only the JSON document in json mode
    json_output = settings.output_format == OutputFormat.JSON
    status = err_console if json_output else console

    if not json_output:
        console.print(f"[cyan]Compiling {len(environments)} environments...[/cyan]")
    run = compile_all(context, environments, InventoryLoader(settings.inventory_dir))

    if output:
        output.write_text(format_run_json(run))
        status.print(f"[green]Plan saved to {output}[/green]")

    if json_output:
        click.echo(format_run_json(run))
    else:
        for key in sorted(run.graphs):
            console.print(build_graph_table(run.graphs[key]))
        console.print(build_summary_table(run))

    if run.failures:
        status.print(build_failures_table(run))
        sys.exit(1)


@cli.command(name="environments")
@config_dir_option
@click.pass_context
def environments_command(ctx: click.Context, config_dir: Path) -> None:
    """List the (account, region) pairs a full compilation covers."""
    try:
        context = CompilationContext(config=load_landing_zone_config(config_dir), settings=_settings(ctx))
        environments = enumerate_environments(context)
    except LandingZonePlannerError as e:
        exit_with_error(str(e))
        return

    directory = AccountDirectory(context.config.accounts)
    table = Table(title="Environments")
    table.add_column("Account", style="cyan")
    table.add_column("Account Id", style="green")
    table.add_column("Region", style="magenta")
    for account_id, region in environments:
        table.add_row(directory.get_account_name_by_id(account_id) or "-", account_id, region)
    console.print(table)


@cli.command(name="targets")
@config_dir_option
@click.option("--item", required=True, help="VPC template or custom stack name")
def targets_command(config_dir: Path, item: str) -> None:
    """Show the accounts and regions a configuration item deploys to."""
    try:
        config = load_landing_zone_config(config_dir)
        targets, item_regions = _find_targets(config, item)
        accounts = AccountDirectory(config.accounts)
        organization = OrganizationDirectory(config.organization)
        account_ids = get_account_ids_from_deployment_target(targets, accounts, organization)
    except LandingZonePlannerError as e:
        exit_with_error(str(e))
        return

    enabled = [r for r in config.global_config.enabled_regions if r in (item_regions or [])]
    regions = get_regions_from_deployment_target(targets, enabled)

    table = Table(title=f"Targets of {item}")
    table.add_column("Account", style="cyan")
    table.add_column("Account Id", style="green")
    table.add_column("Regions", style="magenta")
    for account_id in account_ids:
        table.add_row(
            accounts.get_account_name_by_id(account_id) or "-",
            account_id,
            ", ".join(regions) or "-",
        )
    console.print(table)


@cli.command(name="check-scope")
@config_dir_option
@click.option("--item", required=True, help="VPC template or custom stack name")
@click.option("--account", "account_name", required=True, help="Account name")
@click.option("--region", required=True, help="Region")
def check_scope_command(config_dir: Path, item: str, account_name: str, region: str) -> None:
    """Tell whether a configuration item applies to an account and region."""
    try:
        config = load_landing_zone_config(config_dir)
        targets, item_regions = _find_targets(config, item)
        accounts = AccountDirectory(config.accounts)
        organization = OrganizationDirectory(config.organization)
        account_id = accounts.get_account_id(account_name)
        included = is_included(targets, region, account_id, accounts, organization)
    except LandingZonePlannerError as e:
        exit_with_error(str(e))
        return

    if included and item_regions is not None and region not in item_regions:
        included = False
    if included:
        console.print(f"[green]{item} applies to {account_name} ({account_id}) in {region}[/green]")
    else:
        console.print(f"[yellow]{item} does not apply to {account_name} ({account_id}) in {region}[/yellow]")
        sys.exit(3)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
