"""
Scope model and deployment target resolution.

Accounts, organizational units and the include/exclude expressions that
decide which (account, region) pairs a configuration item applies to.
"""

from .directory import AccountDirectory, OrganizationDirectory, validate_scope_configuration
from .models import (
    ROOT_OU,
    AccountConfig,
    AccountIdConfig,
    AccountsConfig,
    DeploymentTargets,
    OrganizationalUnitConfig,
    OrganizationConfig,
)
from .resolver import (
    get_account_ids_from_deployment_target,
    get_regions_from_deployment_target,
    is_included,
    validate_deployment_target,
)

__all__ = [
    "ROOT_OU",
    "AccountConfig",
    "AccountDirectory",
    "AccountIdConfig",
    "AccountsConfig",
    "DeploymentTargets",
    "OrganizationConfig",
    "OrganizationDirectory",
    "OrganizationalUnitConfig",
    "get_account_ids_from_deployment_target",
    "get_regions_from_deployment_target",
    "is_included",
    "validate_deployment_target",
    "validate_scope_configuration",
]
