"""
Network configuration models (network-config.yaml).

VPCs come in two variants selected by the ``kind`` tag:

- ``vpc``: deployed to exactly one account and region; the default when
  ``kind`` is omitted.
- ``vpc_template``: stamped into every account selected by its deployment
  targets, in a single region.

Both variants share the same resource fields.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

from ..scope.models import DeploymentTargets

RouteTargetType = Literal[
    "transitGateway",
    "natGateway",
    "internetGateway",
    "egressOnlyIgw",
    "virtualPrivateGateway",
    "gatewayEndpoint",
    "gatewayLoadBalancerEndpoint",
    "networkInterface",
    "networkFirewall",
    "vpcPeering",
    "localGateway",
]


def _unique(names: List[str], what: str, scope: str) -> None:
    seen: set = set()
    for name in names:
        if name in seen:
            raise ValueError(f"Duplicate {what} '{name}' in {scope}")
        seen.add(name)


class ShareTargets(BaseModel):
    """Accounts and OUs a subnet or load balancer is shared with."""

    accounts: List[str] = Field(default_factory=list)
    organizational_units: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class FlowLogConfig(BaseModel):
    destinations: List[Literal["s3", "cloud-watch-logs"]] = Field(min_length=1)
    traffic_type: Literal["ALL", "ACCEPT", "REJECT"] = "ALL"
    max_aggregation_interval: Literal[60, 600] = 600

    model_config = ConfigDict(extra="forbid", frozen=True)


class VirtualPrivateGatewayConfig(BaseModel):
    asn: int = Field(ge=1)

    model_config = ConfigDict(extra="forbid", frozen=True)


class RouteTableEntryConfig(BaseModel):
    """A single route in a route table."""

    name: str = Field(min_length=1)
    type: RouteTargetType
    destination: Optional[str] = None
    destination_prefix_list: Optional[str] = None
    target: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_destination(self) -> "RouteTableEntryConfig":
        if self.type != "gatewayEndpoint" and not (
            self.destination or self.destination_prefix_list
        ):
            raise ValueError(
                f"Route '{self.name}' needs a destination or destination_prefix_list"
            )
        return self


class RouteTableConfig(BaseModel):
    name: str = Field(min_length=1)
    routes: List[RouteTableEntryConfig] = Field(default_factory=list)
    gateway_associations: List[Literal["internetGateway", "virtualPrivateGateway"]] = (
        Field(default_factory=list)
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_routes(self) -> "RouteTableConfig":
        scope = f"route table '{self.name}'"
        _unique([r.name for r in self.routes], "route", scope)
        _unique(self.gateway_associations, "gateway association", scope)
        return self


class SubnetConfig(BaseModel):
    name: str = Field(min_length=1)
    availability_zone: Optional[str] = None
    ipv4_cidr_block: Optional[str] = None
    route_table: Optional[str] = None
    map_public_ip_on_launch: bool = False
    share_targets: Optional[ShareTargets] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class NatGatewayConfig(BaseModel):
    name: str = Field(min_length=1)
    subnet: str
    private: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class TransitGatewayReference(BaseModel):
    name: str
    account: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class TransitGatewayAttachmentConfig(BaseModel):
    name: str = Field(min_length=1)
    transit_gateway: TransitGatewayReference
    subnets: List[str] = Field(min_length=1)

    model_config = ConfigDict(extra="forbid", frozen=True)


class SecurityGroupRuleConfig(BaseModel):
    description: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    tcp_ports: List[int] = Field(default_factory=list)
    udp_ports: List[int] = Field(default_factory=list)
    sources: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class SecurityGroupConfig(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    inbound_rules: List[SecurityGroupRuleConfig] = Field(default_factory=list)
    outbound_rules: List[SecurityGroupRuleConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class NetworkAclEntryConfig(BaseModel):
    rule: int = Field(ge=1, le=32766)
    protocol: int = -1
    action: Literal["allow", "deny"]
    cidr: Optional[str] = None
    subnet: Optional[str] = None
    from_port: Optional[int] = None
    to_port: Optional[int] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_peer(self) -> "NetworkAclEntryConfig":
        if bool(self.cidr) == bool(self.subnet):
            raise ValueError(f"NACL rule {self.rule} needs exactly one of cidr or subnet")
        return self


class NetworkAclConfig(BaseModel):
    name: str = Field(min_length=1)
    subnet_associations: List[str] = Field(default_factory=list)
    inbound_rules: List[NetworkAclEntryConfig] = Field(default_factory=list)
    outbound_rules: List[NetworkAclEntryConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_rules(self) -> "NetworkAclConfig":
        scope = f"network ACL '{self.name}'"
        _unique([str(r.rule) for r in self.inbound_rules], "inbound rule", scope)
        _unique([str(r.rule) for r in self.outbound_rules], "outbound rule", scope)
        _unique(self.subnet_associations, "subnet association", scope)
        return self


class ApplicationLoadBalancerConfig(BaseModel):
    name: str = Field(min_length=1)
    subnets: List[str] = Field(min_length=1)
    scheme: Literal["internal", "internet-facing"] = "internal"
    security_groups: List[str] = Field(default_factory=list)
    share_targets: Optional[ShareTargets] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class NetworkLoadBalancerConfig(BaseModel):
    name: str = Field(min_length=1)
    subnets: List[str] = Field(min_length=1)
    scheme: Literal["internal", "internet-facing"] = "internal"

    model_config = ConfigDict(extra="forbid", frozen=True)


class LoadBalancersConfig(BaseModel):
    application_load_balancers: List[ApplicationLoadBalancerConfig] = Field(
        default_factory=list
    )
    network_load_balancers: List[NetworkLoadBalancerConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_unique_names(self) -> "LoadBalancersConfig":
        _unique(
            [alb.name for alb in self.application_load_balancers],
            "application load balancer",
            "load balancers",
        )
        _unique(
            [nlb.name for nlb in self.network_load_balancers],
            "network load balancer",
            "load balancers",
        )
        return self


class _VpcFields(BaseModel):
    """Fields shared by both VPC variants."""

    name: str = Field(min_length=1)
    region: str = Field(min_length=1)
    cidrs: List[str] = Field(default_factory=list)
    internet_gateway: bool = False
    egress_only_igw: bool = False
    virtual_private_gateway: Optional[VirtualPrivateGatewayConfig] = None
    dhcp_options: Optional[str] = None
    default_security_group_rules_deletion: bool = False
    flow_logs: Optional[FlowLogConfig] = None
    route_tables: List[RouteTableConfig] = Field(default_factory=list)
    subnets: List[SubnetConfig] = Field(default_factory=list)
    nat_gateways: List[NatGatewayConfig] = Field(default_factory=list)
    transit_gateway_attachments: List[TransitGatewayAttachmentConfig] = Field(
        default_factory=list
    )
    security_groups: List[SecurityGroupConfig] = Field(default_factory=list)
    network_acls: List[NetworkAclConfig] = Field(default_factory=list)
    load_balancers: Optional[LoadBalancersConfig] = None
    tags: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_references(self):
        """Names are unique and subnets reference declared route tables."""
        scope = f"VPC '{self.name}'"
        _unique([rt.name for rt in self.route_tables], "route table", scope)
        _unique([s.name for s in self.subnets], "subnet", scope)
        _unique([n.name for n in self.nat_gateways], "NAT gateway", scope)
        _unique([sg.name for sg in self.security_groups], "security group", scope)
        _unique([acl.name for acl in self.network_acls], "network ACL", scope)
        _unique(
            [a.name for a in self.transit_gateway_attachments],
            "transit gateway attachment",
            scope,
        )
        _unique(self.cidrs, "CIDR", scope)
        if self.flow_logs:
            _unique(self.flow_logs.destinations, "flow log destination", scope)

        route_tables = {rt.name for rt in self.route_tables}
        subnets = {s.name for s in self.subnets}
        for subnet in self.subnets:
            if subnet.route_table and subnet.route_table not in route_tables:
                raise ValueError(
                    f"Subnet '{subnet.name}' references unknown route table "
                    f"'{subnet.route_table}' in {scope}"
                )
        for nat in self.nat_gateways:
            if nat.subnet not in subnets:
                raise ValueError(
                    f"NAT gateway '{nat.name}' references unknown subnet '{nat.subnet}'"
                )
        for acl in self.network_acls:
            for subnet in acl.subnet_associations:
                if subnet not in subnets:
                    raise ValueError(
                        f"Network ACL '{acl.name}' references unknown subnet '{subnet}'"
                    )
        return self


class VpcConfig(_VpcFields):
    """A VPC owned by a single account."""

    kind: Literal["vpc"] = "vpc"
    account: str = Field(min_length=1)


class VpcTemplateConfig(_VpcFields):
    """A VPC stamped into every account its deployment targets select."""

    kind: Literal["vpc_template"]
    deployment_targets: DeploymentTargets


def _vpc_kind(value: Any) -> str:
    """Variant tag of a VPC entry; an untagged entry is a single-account VPC."""
    if isinstance(value, dict):
        return value.get("kind", "vpc")
    return getattr(value, "kind", "vpc")


VpcItem = Annotated[
    Union[
        Annotated[VpcConfig, Tag("vpc")],
        Annotated[VpcTemplateConfig, Tag("vpc_template")],
    ],
    Discriminator(_vpc_kind),
]


class VpnConnectionConfig(BaseModel):
    """A site-to-site VPN connection terminating on a VPC or transit gateway."""

    name: str = Field(min_length=1)
    vpc: Optional[str] = None
    transit_gateway: Optional[str] = None
    static_routes_only: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_termination(self) -> "VpnConnectionConfig":
        if bool(self.vpc) == bool(self.transit_gateway):
            raise ValueError(
                f"VPN connection '{self.name}' needs exactly one of vpc or transit_gateway"
            )
        return self


class CustomerGatewayConfig(BaseModel):
    name: str = Field(min_length=1)
    account: str
    region: str
    ip_address: str
    asn: int = Field(ge=1)
    vpn_connections: List[VpnConnectionConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_connections(self) -> "CustomerGatewayConfig":
        _unique(
            [c.name for c in self.vpn_connections],
            "VPN connection",
            f"customer gateway '{self.name}'",
        )
        return self


class GatewayLoadBalancerConfig(BaseModel):
    name: str = Field(min_length=1)
    vpc: str
    subnets: List[str] = Field(min_length=1)
    account: Optional[str] = Field(
        default=None,
        description="Owning account; defaults to the delegated admin account",
    )
    cross_zone_load_balancing: bool = True

    model_config = ConfigDict(extra="forbid", frozen=True)


class CentralNetworkServicesConfig(BaseModel):
    delegated_admin_account: str
    gateway_load_balancers: List[GatewayLoadBalancerConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_unique_names(self) -> "CentralNetworkServicesConfig":
        _unique(
            [gwlb.name for gwlb in self.gateway_load_balancers],
            "gateway load balancer",
            "central network services",
        )
        return self


class NetworkConfig(BaseModel):
    """Network configuration root."""

    vpcs: List[VpcItem] = Field(default_factory=list)
    customer_gateways: List[CustomerGatewayConfig] = Field(default_factory=list)
    central_network_services: Optional[CentralNetworkServicesConfig] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_unique_names(self) -> "NetworkConfig":
        _unique([vpc.name for vpc in self.vpcs], "VPC", "network configuration")
        _unique(
            [cgw.name for cgw in self.customer_gateways],
            "customer gateway",
            "network configuration",
        )
        return self
