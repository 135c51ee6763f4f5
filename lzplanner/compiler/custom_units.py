"""Operator-declared custom deployment units."""

import logging
from typing import Dict, List

from ..config.models import CustomizationsConfig, CustomStackConfig
from ..exceptions import UnitReferenceError
from ..scope.directory import AccountDirectory, OrganizationDirectory
from ..scope.resolver import is_included
from .models import DeploymentUnit

logger = logging.getLogger(__name__)


def custom_unit_name(stack: CustomStackConfig, account_id: str, region: str) -> str:
    return f"{stack.name}-{account_id}-{region}"


def is_stack_in_scope(
    stack: CustomStackConfig,
    account_id: str,
    region: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> bool:
    """A stack deploys where its targets include the account and it lists the region."""
    return region in stack.regions and is_included(
        stack.deployment_targets, region, account_id, accounts, organization
    )


def build_custom_units(
    customizations: CustomizationsConfig,
    account_id: str,
    region: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> List[DeploymentUnit]:
    """
    Build the custom units deployed in one (account, region).

    Explicit ``depends_on`` entries are translated from stack names to unit
    names. A dependency on a stack that is configured but not deployed here
    is dropped, since there is nothing to wait for in this environment.

    Raises:
        UnitReferenceError: If depends_on names a stack that is not configured
        ScopeConfigurationError: If a stack's targets name unknown accounts or OUs
    """
    configured = {stack.name for stack in customizations.custom_stacks}
    in_scope: Dict[str, CustomStackConfig] = {
        stack.name: stack
        for stack in customizations.custom_stacks
        if is_stack_in_scope(stack, account_id, region, accounts, organization)
    }

    units = []
    for stack in in_scope.values():
        declared = []
        for dependency in stack.depends_on:
            if dependency not in configured:
                raise UnitReferenceError(
                    f"Custom stack '{stack.name}' depends on unknown stack '{dependency}'",
                    unit=stack.name,
                    reference=dependency,
                )
            if dependency not in in_scope:
                logger.debug(
                    f"Dependency {stack.name} -> {dependency} is not deployed in "
                    f"{account_id}/{region}"
                )
                continue
            declared.append(custom_unit_name(in_scope[dependency], account_id, region))

        units.append(
            DeploymentUnit(
                name=custom_unit_name(stack, account_id, region),
                account_id=account_id,
                region=region,
                run_order=stack.run_order,
                template=stack.template,
                logical_name=stack.name,
                declared_dependencies=declared,
            )
        )
    return units
