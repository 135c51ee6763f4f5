"""
Dependency Graph Builder

Wires deployment units of one (account, region) into a directed graph. An
edge ``a -> b`` means unit ``a`` completes before unit ``b`` begins.

Two ordering mechanisms are composed:

- Declared ordering for custom units: units are grouped by distinct run
  order; each unit depends on every unit of the immediately preceding group
  only. Explicit ``depends_on`` entries add further declared edges.
- Structural ordering for VPC units: each kind-group unit depends on the
  nearest preceding kind-group unit of the same VPC, skipping groups that
  produced no unit.

Acyclicity is checked after construction.
"""

import logging
from itertools import groupby
from typing import Dict, List, Sequence

import networkx as nx

from ..exceptions import CycleDetectedError, UnitReferenceError
from .models import DependencyEdge, DeploymentUnit, EdgeOrigin

logger = logging.getLogger(__name__)


def run_order_groups(units: Sequence[DeploymentUnit]) -> List[List[DeploymentUnit]]:
    """Group run-ordered units by distinct run order, ascending.

    Units keep their enumeration order within a group. Units without a run
    order are not part of any group.
    """
    ordered = sorted(
        (unit for unit in units if unit.run_order is not None),
        key=lambda unit: unit.run_order,
    )
    return [list(group) for _, group in groupby(ordered, key=lambda unit: unit.run_order)]


def find_cycle_names(graph: nx.DiGraph) -> List[str]:
    """Unit names along one cycle, closed with the starting unit."""
    edges = nx.find_cycle(graph)
    return [source for source, _ in edges] + [edges[0][0]]


class DependencyGraphBuilder:
    """Builds and validates the unit dependency graph."""

    def build(self, units: Sequence[DeploymentUnit]) -> nx.DiGraph:
        """
        Build the dependency graph and record the edges on each unit.

        Node attribute ``order`` holds the unit's enumeration index and
        ``unit`` the DeploymentUnit itself.

        Args:
            units: Deployment units in enumeration order

        Returns:
            Acyclic directed graph keyed by unit name

        Raises:
            UnitReferenceError: If unit names collide or a declared
                dependency names a missing unit
            CycleDetectedError: If the combined edges form a cycle
        """
        graph = nx.DiGraph()
        for index, unit in enumerate(units):
            if unit.name in graph:
                raise UnitReferenceError(
                    f"Duplicate deployment unit name '{unit.name}'", unit=unit.name
                )
            graph.add_node(unit.name, order=index, unit=unit)

        self._add_structural_edges(graph, units)
        self._add_declared_edges(graph, units)
        self.assert_acyclic(graph)

        for unit in units:
            predecessors = sorted(
                graph.predecessors(unit.name), key=lambda name: graph.nodes[name]["order"]
            )
            for source in predecessors:
                unit.add_dependency(
                    DependencyEdge(
                        source=source,
                        target=unit.name,
                        origin=graph.edges[source, unit.name]["origin"],
                    )
                )

        logger.info(
            f"Built dependency graph with {graph.number_of_nodes()} units "
            f"and {graph.number_of_edges()} edges"
        )
        return graph

    def _add_structural_edges(self, graph: nx.DiGraph, units: Sequence[DeploymentUnit]) -> None:
        by_vpc: Dict[str, List[DeploymentUnit]] = {}
        for unit in units:
            if unit.vpc_name is not None and unit.kind_group is not None:
                by_vpc.setdefault(unit.vpc_name, []).append(unit)

        for vpc_units in by_vpc.values():
            chain = sorted(vpc_units, key=lambda unit: unit.kind_group)
            for previous, current in zip(chain, chain[1:]):
                graph.add_edge(previous.name, current.name, origin=EdgeOrigin.STRUCTURAL)

    def _add_declared_edges(self, graph: nx.DiGraph, units: Sequence[DeploymentUnit]) -> None:
        groups = run_order_groups(units)
        for previous_group, group in zip(groups, groups[1:]):
            for unit in group:
                for dependency in previous_group:
                    graph.add_edge(dependency.name, unit.name, origin=EdgeOrigin.DECLARED)

        for unit in units:
            for dependency in unit.declared_dependencies:
                if dependency not in graph:
                    raise UnitReferenceError(
                        f"Unit '{unit.name}' depends on unknown unit '{dependency}'",
                        unit=unit.name,
                        reference=dependency,
                    )
                graph.add_edge(dependency, unit.name, origin=EdgeOrigin.DECLARED)

    @staticmethod
    def assert_acyclic(graph: nx.DiGraph) -> None:
        """
        Raises:
            CycleDetectedError: With the unit names along the cycle
        """
        if nx.is_directed_acyclic_graph(graph):
            return
        cycle = find_cycle_names(graph)
        raise CycleDetectedError(
            f"Deployment units form a dependency cycle: {' -> '.join(cycle)}",
            cycle=cycle,
        )
