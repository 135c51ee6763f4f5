"""Rendering of compilation results for the console and for JSON output."""

import json
from typing import List

from rich.table import Table

from .compiler.models import CompilationRun, CompiledGraph


def format_run_json(run: CompilationRun) -> str:
    return json.dumps(run.to_dict(), indent=2)


def build_graph_table(graph: CompiledGraph) -> Table:
    """One row per emitted unit, in execution order."""
    table = Table(title=f"Deployment Units: {graph.account_id} / {graph.region}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Unit", style="cyan")
    table.add_column("Resources", justify="right", style="green")
    table.add_column("Depends On", style="magenta")
    for index, unit in enumerate(graph.units, start=1):
        table.add_row(
            str(index),
            unit.name,
            str(len(unit.resource_keys)),
            "\n".join(unit.depends_on) or "-",
        )
    return table


def build_failures_table(run: CompilationRun) -> Table:
    table = Table(title="Compilation Failures")
    table.add_column("Account", style="cyan")
    table.add_column("Region", style="cyan")
    table.add_column("Error", style="red")
    table.add_column("Message")
    for key in sorted(run.failures):
        failure = run.failures[key]
        table.add_row(
            failure.account_id,
            failure.region,
            failure.error_code or failure.error_type,
            failure.message,
        )
    return table


def build_summary_table(run: CompilationRun) -> Table:
    table = Table(title="Compilation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    graphs: List[CompiledGraph] = list(run.graphs.values())
    table.add_row("Environments compiled", str(len(graphs)))
    table.add_row("Environments failed", str(len(run.failures)))
    table.add_row("Deployment units", str(sum(len(g.units) for g in graphs)))
    table.add_row(
        "Resources left with legacy units",
        str(sum(len(g.legacy_resource_keys) for g in graphs)),
    )
    return table
