"""
Tests for the Dependency Graph Builder.

Tests cover:
- Run-order grouping with edges only from the immediately preceding group
- Structural kind-group chains that skip missing groups
- Explicit depends_on, unknown references and duplicate names
- Cycle detection
"""

import pytest

from lzplanner.compiler import DependencyGraphBuilder, DeploymentUnit, EdgeOrigin, KindGroup
from lzplanner.compiler.graph_builder import run_order_groups
from lzplanner.exceptions import CycleDetectedError, UnitReferenceError

ACCOUNT = "444444444444"
REGION = "us-east-1"


def custom_unit(name, run_order=1, depends_on=()):
    return DeploymentUnit(
        name=name,
        account_id=ACCOUNT,
        region=REGION,
        run_order=run_order,
        declared_dependencies=list(depends_on),
    )


def vpc_unit(vpc_name, group):
    return DeploymentUnit(
        name=f"{vpc_name}-{group.unit_suffix}",
        account_id=ACCOUNT,
        region=REGION,
        vpc_name=vpc_name,
        kind_group=group,
    )


class TestRunOrderGroups:
    """Grouping custom units by distinct run order."""

    def test_groups_are_ascending_and_stable(self):
        units = [custom_unit("c", 3), custom_unit("a", 1), custom_unit("b", 3), custom_unit("d", 4)]

        groups = run_order_groups(units)

        assert [[u.name for u in group] for group in groups] == [["a"], ["c", "b"], ["d"]]

    def test_units_without_run_order_are_skipped(self):
        assert run_order_groups([vpc_unit("Central", KindGroup.VPC_CORE)]) == []


class TestDeclaredEdges:
    """Run order and explicit depends_on."""

    def test_edges_only_from_previous_group(self):
        units = [custom_unit("a", 1), custom_unit("b", 3), custom_unit("c", 3), custom_unit("d", 4)]

        graph = DependencyGraphBuilder().build(units)

        assert set(graph.edges) == {("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")}
        assert not graph.has_edge("a", "d")
        assert not graph.has_edge("b", "c")

    def test_explicit_depends_on_within_group(self):
        units = [custom_unit("a", 1), custom_unit("b", 1, depends_on=["a"])]

        graph = DependencyGraphBuilder().build(units)

        assert graph.has_edge("a", "b")
        assert graph.edges["a", "b"]["origin"] == EdgeOrigin.DECLARED

    def test_unknown_reference(self):
        units = [custom_unit("a", 1, depends_on=["ghost"])]

        with pytest.raises(UnitReferenceError) as exc_info:
            DependencyGraphBuilder().build(units)

        assert exc_info.value.context == {"unit": "a", "reference": "ghost"}

    def test_duplicate_names(self):
        with pytest.raises(UnitReferenceError, match="Duplicate"):
            DependencyGraphBuilder().build([custom_unit("a"), custom_unit("a")])


class TestStructuralEdges:
    """Kind-group chains per VPC."""

    def test_full_chain(self):
        units = [vpc_unit("Central", group) for group in KindGroup]

        graph = DependencyGraphBuilder().build(units)

        names = [unit.name for unit in units]
        assert set(graph.edges) == set(zip(names, names[1:]))
        assert all(data["origin"] == EdgeOrigin.STRUCTURAL for *_, data in graph.edges(data=True))

    def test_chain_skips_missing_groups(self):
        core = vpc_unit("Central", KindGroup.VPC_CORE)
        subnets = vpc_unit("Central", KindGroup.SUBNETS)

        graph = DependencyGraphBuilder().build([core, subnets])

        assert set(graph.edges) == {(core.name, subnets.name)}

    def test_chain_starts_at_first_existing_group(self):
        subnets = vpc_unit("Central", KindGroup.SUBNETS)
        nacls = vpc_unit("Central", KindGroup.NACLS)

        graph = DependencyGraphBuilder().build([subnets, nacls])

        assert list(graph.predecessors(subnets.name)) == []
        assert list(graph.predecessors(nacls.name)) == [subnets.name]

    def test_vpcs_are_independent(self):
        units = [
            vpc_unit("Central", KindGroup.VPC_CORE),
            vpc_unit("Spoke", KindGroup.VPC_CORE),
            vpc_unit("Spoke", KindGroup.SUBNETS),
        ]

        graph = DependencyGraphBuilder().build(units)

        assert set(graph.edges) == {("Spoke-VpcStack", "Spoke-VpcSubnetsStack")}

    def test_custom_and_vpc_units_are_not_linked(self):
        units = [vpc_unit("Central", KindGroup.VPC_CORE), custom_unit("a", 1), custom_unit("b", 2)]

        graph = DependencyGraphBuilder().build(units)

        assert set(graph.edges) == {("a", "b")}


class TestCycles:
    """Cycle detection after construction."""

    def test_self_dependency(self):
        with pytest.raises(CycleDetectedError) as exc_info:
            DependencyGraphBuilder().build([custom_unit("a", depends_on=["a"])])

        assert exc_info.value.cycle == ["a", "a"]

    def test_depends_on_against_run_order(self):
        units = [custom_unit("a", 1, depends_on=["b"]), custom_unit("b", 2)]

        with pytest.raises(CycleDetectedError) as exc_info:
            DependencyGraphBuilder().build(units)

        assert set(exc_info.value.cycle) == {"a", "b"}
        assert exc_info.value.cycle[0] == exc_info.value.cycle[-1]


class TestEdgesRecordedOnUnits:
    """Units carry their incoming edges after build."""

    def test_dependencies_in_enumeration_order(self):
        units = [custom_unit("a", 1), custom_unit("b", 1), custom_unit("c", 2)]

        DependencyGraphBuilder().build(units)

        assert units[2].depends_on == ["a", "b"]
        assert units[0].depends_on == []
        assert units[2].dependencies[0].origin == EdgeOrigin.DECLARED
