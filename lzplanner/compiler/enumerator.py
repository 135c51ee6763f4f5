"""
Logical resource enumeration.

Turns network configuration into the flat list of LogicalResources desired in
one (account, region), each carrying the lookup values the existence oracle
needs. Enumeration order follows configuration order and is stable across
runs.
"""

import logging
from typing import Iterator, List, Union

from ..config.models import LandingZoneConfig
from ..inventory.kinds import ResourceKind
from ..network.models import VpcConfig, VpcTemplateConfig
from ..scope.directory import AccountDirectory, OrganizationDirectory
from ..scope.resolver import is_included
from .models import LogicalResource

logger = logging.getLogger(__name__)

Vpc = Union[VpcConfig, VpcTemplateConfig]


def is_vpc_in_scope(
    vpc: Vpc,
    account_id: str,
    region: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> bool:
    """A plain VPC targets one account; a VPC template uses its deployment targets."""
    if vpc.region != region:
        return False
    if isinstance(vpc, VpcConfig):
        return accounts.find_account_id(vpc.account) == account_id
    return is_included(vpc.deployment_targets, region, account_id, accounts, organization)


def vpcs_in_scope(
    config: LandingZoneConfig,
    account_id: str,
    region: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> List[Vpc]:
    """VPCs deployed in the (account, region), in configuration order."""
    return [
        vpc
        for vpc in config.network.vpcs
        if is_vpc_in_scope(vpc, account_id, region, accounts, organization)
    ]


def _resource(vpc_name: str, kind: ResourceKind, discriminator: str, **lookup: str) -> LogicalResource:
    return LogicalResource(
        vpc_name=vpc_name,
        kind=kind,
        discriminator=discriminator,
        lookup_values={"vpcName": vpc_name, **lookup},
    )


def enumerate_vpc_resources(vpc: Vpc) -> Iterator[LogicalResource]:
    """Yield every logical resource of a VPC."""
    name = vpc.name

    yield _resource(name, ResourceKind.VPC, name)

    # The first CIDR is the VPC's primary block
    for cidr in vpc.cidrs[1:]:
        yield _resource(name, ResourceKind.VPC_CIDR_BLOCK, cidr, cidrBlock=cidr)

    if vpc.flow_logs:
        for destination in vpc.flow_logs.destinations:
            yield _resource(
                name, ResourceKind.FLOW_LOG, destination, flowLogDestinationType=destination
            )

    if vpc.internet_gateway:
        yield _resource(name, ResourceKind.INTERNET_GATEWAY, "internet-gateway")
    if vpc.egress_only_igw:
        yield _resource(
            name, ResourceKind.EGRESS_ONLY_INTERNET_GATEWAY, "egress-only-internet-gateway"
        )
    if vpc.virtual_private_gateway:
        yield _resource(name, ResourceKind.VIRTUAL_PRIVATE_GATEWAY, "virtual-private-gateway")
    if vpc.dhcp_options:
        yield _resource(
            name,
            ResourceKind.DHCP_OPTIONS_ASSOCIATION,
            vpc.dhcp_options,
            dhcpOptionsName=vpc.dhcp_options,
        )
    if vpc.default_security_group_rules_deletion:
        yield _resource(
            name, ResourceKind.DELETE_DEFAULT_SECURITY_GROUP_RULES, "default-security-group"
        )

    for route_table in vpc.route_tables:
        yield _resource(
            name, ResourceKind.ROUTE_TABLE, route_table.name, routeTableName=route_table.name
        )
        for association in route_table.gateway_associations:
            yield _resource(
                name,
                ResourceKind.GATEWAY_ROUTE_TABLE_ASSOCIATION,
                f"{route_table.name}/{association}",
                routeTableName=route_table.name,
                associationType=association,
            )
        for route in route_table.routes:
            yield _resource(
                name,
                ResourceKind.ROUTE,
                f"{route_table.name}/{route.name}",
                routeTableName=route_table.name,
                routeTableEntryName=route.name,
                type=route.type,
            )

    for security_group in vpc.security_groups:
        yield _resource(
            name,
            ResourceKind.SECURITY_GROUP,
            security_group.name,
            securityGroupName=security_group.name,
        )

    for subnet in vpc.subnets:
        yield _resource(name, ResourceKind.SUBNET, subnet.name, subnetName=subnet.name)
        if subnet.route_table:
            yield _resource(
                name,
                ResourceKind.SUBNET_ROUTE_TABLE_ASSOCIATION,
                f"{subnet.name}/{subnet.route_table}",
                subnetName=subnet.name,
                routeTableName=subnet.route_table,
            )

    for nat_gateway in vpc.nat_gateways:
        yield _resource(
            name, ResourceKind.NAT_GATEWAY, nat_gateway.name, natGatewayName=nat_gateway.name
        )

    for attachment in vpc.transit_gateway_attachments:
        yield _resource(
            name,
            ResourceKind.TRANSIT_GATEWAY_ATTACHMENT,
            attachment.name,
            transitGatewayName=attachment.transit_gateway.name,
            transitGatewayAttachmentName=attachment.name,
        )

    for subnet in vpc.subnets:
        if subnet.share_targets:
            yield _resource(name, ResourceKind.SUBNET_SHARE, subnet.name, subnetName=subnet.name)

    for acl in vpc.network_acls:
        yield _resource(name, ResourceKind.NETWORK_ACL, acl.name, naclName=acl.name)
        for subnet_name in acl.subnet_associations:
            yield _resource(
                name,
                ResourceKind.NETWORK_ACL_SUBNET_ASSOCIATION,
                f"{acl.name}/{subnet_name}",
                naclName=acl.name,
                subnetName=subnet_name,
            )
        for direction, rules in (("ingress", acl.inbound_rules), ("egress", acl.outbound_rules)):
            for rule in rules:
                yield _resource(
                    name,
                    ResourceKind.NETWORK_ACL_ENTRY,
                    f"{acl.name}/{direction}/{rule.rule}",
                    naclName=acl.name,
                    ruleNumber=str(rule.rule),
                    type=direction,
                )

    if vpc.load_balancers:
        for alb in vpc.load_balancers.application_load_balancers:
            yield _resource(name, ResourceKind.LOAD_BALANCER, f"alb/{alb.name}", albName=alb.name)
        for nlb in vpc.load_balancers.network_load_balancers:
            yield _resource(name, ResourceKind.LOAD_BALANCER, f"nlb/{nlb.name}", nlbName=nlb.name)


def enumerate_vpn_connections(
    config: LandingZoneConfig, account_id: str, region: str, accounts: AccountDirectory
) -> Iterator[LogicalResource]:
    """VPN connections from customer gateways owned by the (account, region).

    Connections terminating on a transit gateway are not VPC resources.
    """
    for gateway in config.network.customer_gateways:
        if gateway.region != region or accounts.find_account_id(gateway.account) != account_id:
            continue
        for connection in gateway.vpn_connections:
            if not connection.vpc:
                continue
            yield LogicalResource(
                vpc_name=connection.vpc,
                kind=ResourceKind.VPN_CONNECTION,
                discriminator=f"{gateway.name}/{connection.name}",
                lookup_values={
                    "vpnName": connection.name,
                    "vpcName": connection.vpc,
                    "cgwName": gateway.name,
                },
            )


def enumerate_gateway_load_balancers(
    config: LandingZoneConfig, account_id: str, region: str, accounts: AccountDirectory
) -> Iterator[LogicalResource]:
    """Gateway load balancers of central network services, deployed in the home region."""
    services = config.network.central_network_services
    if services is None or region != config.global_config.home_region:
        return
    for gwlb in services.gateway_load_balancers:
        owner = gwlb.account or services.delegated_admin_account
        if accounts.find_account_id(owner) != account_id:
            continue
        yield LogicalResource(
            vpc_name=gwlb.vpc,
            kind=ResourceKind.LOAD_BALANCER,
            discriminator=f"gwlb/{gwlb.name}",
            lookup_values={"vpcName": gwlb.vpc, "gwlbName": gwlb.name},
        )


def enumerate_environment_resources(
    config: LandingZoneConfig,
    account_id: str,
    region: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> List[LogicalResource]:
    """All logical resources desired in the (account, region), in enumeration order."""
    resources: List[LogicalResource] = []
    for vpc in vpcs_in_scope(config, account_id, region, accounts, organization):
        resources.extend(enumerate_vpc_resources(vpc))
    resources.extend(enumerate_vpn_connections(config, account_id, region, accounts))
    resources.extend(enumerate_gateway_load_balancers(config, account_id, region, accounts))
    logger.debug(f"Enumerated {len(resources)} logical resources for {account_id}/{region}")
    return resources
