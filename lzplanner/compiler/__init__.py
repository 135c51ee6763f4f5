"""Deployment unit compilation: partitioning, dependency graph and emission."""

from .custom_units import build_custom_units
from .emitter import GraphEmitter
from .enumerator import enumerate_environment_resources, enumerate_vpc_resources, vpcs_in_scope
from .graph_builder import DependencyGraphBuilder, run_order_groups
from .models import (
    CompilationContext,
    CompilationFailure,
    CompilationRun,
    CompiledGraph,
    DependencyEdge,
    DeploymentUnit,
    EdgeOrigin,
    KindGroup,
    LogicalResource,
    UnitDescriptor,
)
from .partitioner import PartitionResult, UnitPartitioner
from .pipeline import compile_all, compile_environment, enumerate_environments

__all__ = [
    "CompilationContext",
    "CompilationFailure",
    "CompilationRun",
    "CompiledGraph",
    "DependencyEdge",
    "DependencyGraphBuilder",
    "DeploymentUnit",
    "EdgeOrigin",
    "GraphEmitter",
    "KindGroup",
    "LogicalResource",
    "PartitionResult",
    "UnitDescriptor",
    "UnitPartitioner",
    "build_custom_units",
    "compile_all",
    "compile_environment",
    "enumerate_environment_resources",
    "enumerate_environments",
    "enumerate_vpc_resources",
    "run_order_groups",
    "vpcs_in_scope",
]
