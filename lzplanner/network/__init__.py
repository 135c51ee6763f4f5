"""Network configuration models."""

from .models import (
    ApplicationLoadBalancerConfig,
    CentralNetworkServicesConfig,
    CustomerGatewayConfig,
    FlowLogConfig,
    GatewayLoadBalancerConfig,
    LoadBalancersConfig,
    NatGatewayConfig,
    NetworkAclConfig,
    NetworkAclEntryConfig,
    NetworkConfig,
    NetworkLoadBalancerConfig,
    RouteTableConfig,
    RouteTableEntryConfig,
    SecurityGroupConfig,
    SecurityGroupRuleConfig,
    ShareTargets,
    SubnetConfig,
    TransitGatewayAttachmentConfig,
    TransitGatewayReference,
    VirtualPrivateGatewayConfig,
    VpcConfig,
    VpcItem,
    VpcTemplateConfig,
    VpnConnectionConfig,
)

__all__ = [
    "ApplicationLoadBalancerConfig",
    "CentralNetworkServicesConfig",
    "CustomerGatewayConfig",
    "FlowLogConfig",
    "GatewayLoadBalancerConfig",
    "LoadBalancersConfig",
    "NatGatewayConfig",
    "NetworkAclConfig",
    "NetworkAclEntryConfig",
    "NetworkConfig",
    "NetworkLoadBalancerConfig",
    "RouteTableConfig",
    "RouteTableEntryConfig",
    "SecurityGroupConfig",
    "SecurityGroupRuleConfig",
    "ShareTargets",
    "SubnetConfig",
    "TransitGatewayAttachmentConfig",
    "TransitGatewayReference",
    "VirtualPrivateGatewayConfig",
    "VpcConfig",
    "VpcItem",
    "VpcTemplateConfig",
    "VpnConnectionConfig",
]
