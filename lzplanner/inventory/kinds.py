"""Resource kinds and the lookup keys that identify each of them."""

from enum import Enum
from typing import Dict, Tuple


class ResourceKind(str, Enum):
    """Kinds of logical resources, named by their CloudFormation type."""

    VPC = "AWS::EC2::VPC"
    FLOW_LOG = "AWS::EC2::FlowLog"
    VPC_CIDR_BLOCK = "AWS::EC2::VPCCidrBlock"
    INTERNET_GATEWAY = "AWS::EC2::InternetGateway"
    EGRESS_ONLY_INTERNET_GATEWAY = "AWS::EC2::EgressOnlyInternetGateway"
    VIRTUAL_PRIVATE_GATEWAY = "AWS::EC2::VPNGateway"
    DHCP_OPTIONS_ASSOCIATION = "AWS::EC2::VPCDHCPOptionsAssociation"
    DELETE_DEFAULT_SECURITY_GROUP_RULES = "Custom::DeleteDefaultSecurityGroupRules"
    VPN_CONNECTION = "AWS::EC2::VPNConnection"
    ROUTE_TABLE = "AWS::EC2::RouteTable"
    GATEWAY_ROUTE_TABLE_ASSOCIATION = "AWS::EC2::GatewayRouteTableAssociation"
    ROUTE = "AWS::EC2::Route"
    SECURITY_GROUP = "AWS::EC2::SecurityGroup"
    SUBNET = "AWS::EC2::Subnet"
    SUBNET_ROUTE_TABLE_ASSOCIATION = "AWS::EC2::SubnetRouteTableAssociation"
    NAT_GATEWAY = "AWS::EC2::NatGateway"
    TRANSIT_GATEWAY_ATTACHMENT = "AWS::EC2::TransitGatewayAttachment"
    SUBNET_SHARE = "AWS::RAM::ResourceShare"
    NETWORK_ACL = "AWS::EC2::NetworkAcl"
    NETWORK_ACL_SUBNET_ASSOCIATION = "AWS::EC2::SubnetNetworkAclAssociation"
    NETWORK_ACL_ENTRY = "AWS::EC2::NetworkAclEntry"
    LOAD_BALANCER = "AWS::ElasticLoadBalancingV2::LoadBalancer"

    @classmethod
    def parse(cls, value: str) -> "ResourceKind":
        """Look up a kind by CloudFormation type or member name."""
        try:
            return cls(value)
        except ValueError:
            return cls[value.upper()]


# Keys every lookup of a kind must carry.
REQUIRED_LOOKUP_KEYS: Dict[ResourceKind, Tuple[str, ...]] = {
    ResourceKind.VPC: ("vpcName",),
    ResourceKind.FLOW_LOG: ("vpcName", "flowLogDestinationType"),
    ResourceKind.VPC_CIDR_BLOCK: ("vpcName", "cidrBlock"),
    ResourceKind.INTERNET_GATEWAY: ("vpcName",),
    ResourceKind.EGRESS_ONLY_INTERNET_GATEWAY: ("vpcName",),
    ResourceKind.VIRTUAL_PRIVATE_GATEWAY: ("vpcName",),
    ResourceKind.DHCP_OPTIONS_ASSOCIATION: ("vpcName", "dhcpOptionsName"),
    ResourceKind.DELETE_DEFAULT_SECURITY_GROUP_RULES: ("vpcName",),
    ResourceKind.VPN_CONNECTION: ("vpnName", "vpcName", "cgwName"),
    ResourceKind.ROUTE_TABLE: ("vpcName", "routeTableName"),
    ResourceKind.GATEWAY_ROUTE_TABLE_ASSOCIATION: (
        "vpcName",
        "routeTableName",
        "associationType",
    ),
    ResourceKind.ROUTE: ("vpcName", "routeTableName", "routeTableEntryName", "type"),
    ResourceKind.SECURITY_GROUP: ("vpcName", "securityGroupName"),
    ResourceKind.SUBNET: ("vpcName", "subnetName"),
    ResourceKind.SUBNET_ROUTE_TABLE_ASSOCIATION: (
        "vpcName",
        "subnetName",
        "routeTableName",
    ),
    ResourceKind.NAT_GATEWAY: ("vpcName", "natGatewayName"),
    ResourceKind.TRANSIT_GATEWAY_ATTACHMENT: (
        "vpcName",
        "transitGatewayName",
        "transitGatewayAttachmentName",
    ),
    ResourceKind.SUBNET_SHARE: ("vpcName", "subnetName"),
    ResourceKind.NETWORK_ACL: ("vpcName", "naclName"),
    ResourceKind.NETWORK_ACL_SUBNET_ASSOCIATION: ("vpcName", "naclName", "subnetName"),
    ResourceKind.NETWORK_ACL_ENTRY: ("vpcName", "naclName", "ruleNumber", "type"),
    ResourceKind.LOAD_BALANCER: ("vpcName",),
}

# Kinds that additionally need exactly one key out of a set of variants.
VARIANT_LOOKUP_KEYS: Dict[ResourceKind, Tuple[str, ...]] = {
    ResourceKind.LOAD_BALANCER: ("albName", "nlbName", "gwlbName"),
}
