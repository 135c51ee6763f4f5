"""
Compilation pipeline.

Compiles one (account, region) at a time: scope resolution, resource
enumeration, partitioning against the existence inventory, custom units,
dependency graph and emission. Many pairs are compiled concurrently with
compile-and-collect semantics: a failed pair is recorded and never stops
its siblings.

Usage:
    ```python
    from lzplanner.compiler.pipeline import compile_all, enumerate_environments

    context = CompilationContext(config=load_landing_zone_config(path))
    run = compile_all(context, enumerate_environments(context), InventoryLoader(dir))
    ```
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from ..exceptions import InventoryContextError, LandingZonePlannerError
from ..inventory.loader import InventoryLoader
from ..inventory.models import InventorySnapshot
from ..inventory.oracle import ResourceExistenceOracle
from ..scope.directory import AccountDirectory, OrganizationDirectory, validate_scope_configuration
from .custom_units import build_custom_units
from .emitter import GraphEmitter
from .enumerator import enumerate_environment_resources, vpcs_in_scope
from .graph_builder import DependencyGraphBuilder
from .models import CompilationContext, CompilationFailure, CompilationRun, CompiledGraph
from .partitioner import UnitPartitioner

logger = structlog.get_logger(__name__)

Environment = Tuple[str, str]


def compile_environment(
    context: CompilationContext,
    account_id: str,
    region: str,
    snapshot: InventorySnapshot,
) -> CompiledGraph:
    """
    Compile the ordered deployment units of one (account, region).

    Scope directories and the existence oracle are created for this call
    only and discarded afterwards.

    Args:
        context: Immutable configuration and settings
        account_id: Account to compile
        region: Region to compile
        snapshot: Inventory snapshot of the same (account, region)

    Returns:
        CompiledGraph for the pair

    Raises:
        LandingZonePlannerError: Any scope, inventory or graph error; the
            pair produces no partial output
    """
    if snapshot.environment != (account_id, region):
        raise InventoryContextError(
            "Inventory snapshot belongs to a different environment",
            expected=f"{account_id}/{region}",
            actual="/".join(snapshot.environment),
        )

    config = context.config
    accounts = AccountDirectory(config.accounts)
    organization = OrganizationDirectory(config.organization)
    validate_scope_configuration(organization, config.accounts)

    oracle = ResourceExistenceOracle(snapshot, enabled=context.settings.incremental_units)

    vpcs = vpcs_in_scope(config, account_id, region, accounts, organization)
    resources = enumerate_environment_resources(
        config, account_id, region, accounts, organization
    )
    partition = UnitPartitioner(
        account_id, region, oracle, unit_prefix=context.settings.unit_prefix
    ).partition(resources, [vpc.name for vpc in vpcs])

    custom_units = build_custom_units(
        config.customizations, account_id, region, accounts, organization
    )

    units = [*partition.units, *custom_units]
    graph = DependencyGraphBuilder().build(units)
    compiled = GraphEmitter().emit(
        graph,
        account_id,
        region,
        legacy_resource_keys=[item.resource.resource_key for item in partition.legacy],
    )
    logger.info(
        "Compiled environment",
        account_id=account_id,
        region=region,
        units=len(compiled.units),
        legacy_resources=len(partition.legacy),
    )
    return compiled


def enumerate_environments(
    context: CompilationContext,
    accounts: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
) -> List[Environment]:
    """
    List (account_id, region) pairs to compile.

    Args:
        context: Compilation context
        accounts: Account names to restrict to; all accounts with an id
            when None
        regions: Regions to restrict to; all enabled regions when None

    Raises:
        ScopeConfigurationError: If an account name is unknown or has no id
    """
    directory = AccountDirectory(context.config.accounts)
    if accounts:
        account_ids = [directory.get_account_id(name) for name in accounts]
    else:
        account_ids = directory.all_account_ids()

    enabled = context.config.global_config.enabled_regions
    selected_regions = [r for r in enabled if not regions or r in regions]
    return [(account_id, region) for account_id in account_ids for region in selected_regions]


def compile_all(
    context: CompilationContext,
    environments: Iterable[Environment],
    inventory_loader: InventoryLoader,
    max_workers: Optional[int] = None,
) -> CompilationRun:
    """
    Compile many (account, region) pairs concurrently.

    Each pair loads its own inventory snapshot. Any error, planner or
    unexpected, becomes a CompilationFailure entry for that pair only.

    Args:
        context: Immutable configuration and settings
        environments: Pairs to compile
        inventory_loader: Source of per-pair inventory snapshots
        max_workers: Thread count, defaults to settings.max_workers

    Returns:
        CompilationRun with graphs and failures keyed by (account_id, region)
    """
    environments = list(dict.fromkeys(environments))
    workers = max_workers or context.settings.max_workers
    run = CompilationRun()

    def _compile(environment: Environment) -> CompiledGraph:
        account_id, region = environment
        snapshot = inventory_loader.load(account_id, region)
        return compile_environment(context, account_id, region, snapshot)

    logger.info("Compiling environments", count=len(environments), max_workers=workers)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(_compile, env): env for env in environments}
        for future in as_completed(futures):
            account_id, region = futures[future]
            try:
                run.graphs[(account_id, region)] = future.result()
            except LandingZonePlannerError as e:
                logger.error(
                    "Environment compilation failed",
                    account_id=account_id,
                    region=region,
                    error=str(e),
                )
                run.failures[(account_id, region)] = CompilationFailure.from_error(
                    account_id, region, e
                )
            except Exception as e:
                logger.exception(
                    "Unexpected error compiling environment",
                    account_id=account_id,
                    region=region,
                )
                run.failures[(account_id, region)] = CompilationFailure.from_error(
                    account_id, region, e
                )

    logger.info(
        "Compilation finished",
        succeeded=len(run.graphs),
        failed=len(run.failures),
    )
    return run
