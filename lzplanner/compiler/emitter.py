"""Graph Compiler / Emitter: stable topological emission of deployment units."""

import logging
from typing import Iterable

import networkx as nx

from ..exceptions import CycleDetectedError
from .graph_builder import find_cycle_names
from .models import CompiledGraph, DeploymentUnit, UnitDescriptor

logger = logging.getLogger(__name__)


class GraphEmitter:
    """Orders a unit graph and freezes its units into descriptors."""

    def emit(
        self,
        graph: nx.DiGraph,
        account_id: str,
        region: str,
        legacy_resource_keys: Iterable[str] = (),
    ) -> CompiledGraph:
        """
        Topologically sort the graph, breaking ties by enumeration order.

        Args:
            graph: Graph produced by DependencyGraphBuilder
            account_id: Account of the compiled environment
            region: Region of the compiled environment
            legacy_resource_keys: Keys of resources left with legacy units

        Returns:
            CompiledGraph with ordered descriptors and predecessor sets

        Raises:
            CycleDetectedError: If the graph is not a DAG
        """
        try:
            ordered = list(
                nx.lexicographical_topological_sort(
                    graph, key=lambda name: graph.nodes[name]["order"]
                )
            )
        except nx.NetworkXUnfeasible as e:
            cycle = find_cycle_names(graph)
            raise CycleDetectedError(
                f"Cannot order deployment units: {' -> '.join(cycle)}",
                cycle=cycle,
                cause=e,
            ) from e

        compiled = CompiledGraph(
            account_id=account_id,
            region=region,
            legacy_resource_keys=list(legacy_resource_keys),
        )
        for name in ordered:
            unit: DeploymentUnit = graph.nodes[name]["unit"]
            unit.freeze()
            compiled.units.append(
                UnitDescriptor(
                    name=unit.name,
                    account_id=unit.account_id,
                    region=unit.region,
                    resource_keys=tuple(unit.resource_keys),
                    depends_on=tuple(unit.depends_on),
                    template=unit.template,
                    kind_group=unit.kind_group.name if unit.kind_group is not None else None,
                )
            )
            compiled.predecessors[name] = frozenset(graph.predecessors(name))

        logger.debug(f"Emitted {len(compiled.units)} units for {account_id}/{region}")
        return compiled
