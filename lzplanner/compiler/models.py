"""Data structures shared by the compilation stages."""

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..config.models import LandingZoneConfig, PlannerSettings
from ..exceptions import LandingZonePlannerError, UnitFrozenError
from ..inventory.kinds import ResourceKind

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9-]")


def sanitize_unit_name_part(value: str) -> str:
    """Replace every character outside [A-Za-z0-9-] with '-'."""
    return _UNSAFE_NAME_CHARS.sub("-", value)


class KindGroup(IntEnum):
    """Ordered buckets a VPC's resources are partitioned into."""

    VPC_CORE = 0
    ROUTE_TABLES = 1
    SECURITY_GROUPS = 2
    SUBNETS = 3
    SUBNET_SHARES = 4
    NACLS = 5
    LOAD_BALANCERS = 6

    @property
    def unit_suffix(self) -> str:
        return _UNIT_SUFFIXES[self]


_UNIT_SUFFIXES = {
    KindGroup.VPC_CORE: "VpcStack",
    KindGroup.ROUTE_TABLES: "VpcRouteTablesStack",
    KindGroup.SECURITY_GROUPS: "VpcSecurityGroupsStack",
    KindGroup.SUBNETS: "VpcSubnetsStack",
    KindGroup.SUBNET_SHARES: "VpcSubnetsShareStack",
    KindGroup.NACLS: "VpcNaclsStack",
    KindGroup.LOAD_BALANCERS: "VpcLoadBalancersStack",
}

KIND_GROUPS: Dict[ResourceKind, KindGroup] = {
    ResourceKind.VPC: KindGroup.VPC_CORE,
    ResourceKind.FLOW_LOG: KindGroup.VPC_CORE,
    ResourceKind.VPC_CIDR_BLOCK: KindGroup.VPC_CORE,
    ResourceKind.INTERNET_GATEWAY: KindGroup.VPC_CORE,
    ResourceKind.EGRESS_ONLY_INTERNET_GATEWAY: KindGroup.VPC_CORE,
    ResourceKind.VIRTUAL_PRIVATE_GATEWAY: KindGroup.VPC_CORE,
    ResourceKind.DHCP_OPTIONS_ASSOCIATION: KindGroup.VPC_CORE,
    ResourceKind.DELETE_DEFAULT_SECURITY_GROUP_RULES: KindGroup.VPC_CORE,
    ResourceKind.VPN_CONNECTION: KindGroup.VPC_CORE,
    ResourceKind.ROUTE_TABLE: KindGroup.ROUTE_TABLES,
    ResourceKind.GATEWAY_ROUTE_TABLE_ASSOCIATION: KindGroup.ROUTE_TABLES,
    ResourceKind.ROUTE: KindGroup.ROUTE_TABLES,
    ResourceKind.SECURITY_GROUP: KindGroup.SECURITY_GROUPS,
    ResourceKind.SUBNET: KindGroup.SUBNETS,
    ResourceKind.SUBNET_ROUTE_TABLE_ASSOCIATION: KindGroup.SUBNETS,
    ResourceKind.NAT_GATEWAY: KindGroup.SUBNETS,
    ResourceKind.TRANSIT_GATEWAY_ATTACHMENT: KindGroup.SUBNETS,
    ResourceKind.SUBNET_SHARE: KindGroup.SUBNET_SHARES,
    ResourceKind.NETWORK_ACL: KindGroup.NACLS,
    ResourceKind.NETWORK_ACL_SUBNET_ASSOCIATION: KindGroup.NACLS,
    ResourceKind.NETWORK_ACL_ENTRY: KindGroup.NACLS,
    ResourceKind.LOAD_BALANCER: KindGroup.LOAD_BALANCERS,
}


@dataclass(frozen=True)
class CompilationContext:
    """Immutable inputs of a compilation pass.

    Shared read-only by every (account, region) compilation.
    """

    config: LandingZoneConfig
    settings: PlannerSettings = field(default_factory=PlannerSettings)


@dataclass(frozen=True)
class LogicalResource:
    """A desired resource identified by (vpc_name, kind, discriminator)."""

    vpc_name: str
    kind: ResourceKind
    discriminator: str
    lookup_values: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.vpc_name, self.kind.value, self.discriminator)

    @property
    def resource_key(self) -> str:
        return f"{self.vpc_name}/{self.kind.value}/{self.discriminator}"

    @property
    def kind_group(self) -> KindGroup:
        return KIND_GROUPS[self.kind]


class EdgeOrigin(str, Enum):
    """Why a dependency edge exists."""

    DECLARED = "declared"  # run order or explicit depends_on
    STRUCTURAL = "structural"  # kind-group chain of a VPC


@dataclass(frozen=True)
class DependencyEdge:
    """The source unit completes before the target unit begins."""

    source: str
    target: str
    origin: EdgeOrigin


@dataclass
class DeploymentUnit:
    """Smallest independently deployable group of resources.

    Created empty, filled by the partitioner, wired by the graph builder and
    frozen by the emitter.
    """

    name: str
    account_id: str
    region: str
    vpc_name: Optional[str] = None
    kind_group: Optional[KindGroup] = None
    run_order: Optional[int] = None
    template: Optional[str] = None
    logical_name: Optional[str] = None
    declared_dependencies: List[str] = field(default_factory=list)
    resources: List[LogicalResource] = field(default_factory=list)
    dependencies: List[DependencyEdge] = field(default_factory=list)
    frozen: bool = False

    def _check_mutable(self) -> None:
        if self.frozen:
            raise UnitFrozenError(
                f"Deployment unit '{self.name}' was already emitted", unit=self.name
            )

    def add_resource(self, resource: LogicalResource) -> None:
        self._check_mutable()
        self.resources.append(resource)

    def add_dependency(self, edge: DependencyEdge) -> None:
        self._check_mutable()
        if edge.target != self.name:
            raise ValueError(f"Edge {edge.source} -> {edge.target} does not target {self.name}")
        if edge not in self.dependencies:
            self.dependencies.append(edge)

    def freeze(self) -> None:
        self.frozen = True

    @property
    def depends_on(self) -> List[str]:
        return [edge.source for edge in self.dependencies]

    @property
    def resource_keys(self) -> List[str]:
        return [resource.resource_key for resource in self.resources]


@dataclass(frozen=True)
class UnitDescriptor:
    """Emitted, immutable description of a deployment unit."""

    name: str
    account_id: str
    region: str
    resource_keys: Tuple[str, ...]
    depends_on: Tuple[str, ...]
    template: Optional[str] = None
    kind_group: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "account": self.account_id,
            "region": self.region,
            "resourceKeys": list(self.resource_keys),
            "dependsOn": list(self.depends_on),
        }
        if self.template:
            data["template"] = self.template
        if self.kind_group:
            data["kindGroup"] = self.kind_group
        return data


@dataclass
class CompiledGraph:
    """Ordered deployment units for one (account, region)."""

    account_id: str
    region: str
    units: List[UnitDescriptor] = field(default_factory=list)
    predecessors: Dict[str, FrozenSet[str]] = field(default_factory=dict)
    legacy_resource_keys: List[str] = field(default_factory=list)

    @property
    def unit_names(self) -> List[str]:
        return [unit.name for unit in self.units]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account_id,
            "region": self.region,
            "units": [unit.to_dict() for unit in self.units],
            "legacyResourceKeys": list(self.legacy_resource_keys),
        }


@dataclass(frozen=True)
class CompilationFailure:
    """Structured failure of one (account, region) compilation."""

    account_id: str
    region: str
    error_type: str
    error_code: Optional[str]
    message: str
    context: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_error(
        cls, account_id: str, region: str, error: Exception
    ) -> "CompilationFailure":
        if not isinstance(error, LandingZonePlannerError):
            return cls(
                account_id=account_id,
                region=region,
                error_type=error.__class__.__name__,
                error_code=None,
                message=str(error),
            )
        details = error.to_dict()
        return cls(
            account_id=account_id,
            region=region,
            error_type=details["error_type"],
            error_code=details["error_code"],
            message=details["message"],
            context=dict(details["context"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account_id,
            "region": self.region,
            "errorType": self.error_type,
            "errorCode": self.error_code,
            "message": self.message,
            "context": self.context,
        }


@dataclass
class CompilationRun:
    """Collected results of compiling many (account, region) pairs."""

    graphs: Dict[Tuple[str, str], CompiledGraph] = field(default_factory=dict)
    failures: Dict[Tuple[str, str], CompilationFailure] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "graphs": [self.graphs[key].to_dict() for key in sorted(self.graphs)],
            "failures": [self.failures[key].to_dict() for key in sorted(self.failures)],
        }
