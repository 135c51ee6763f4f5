"""Deployment target resolution.

Decides whether a configuration item scoped by a ``DeploymentTargets``
expression applies to a given (account, region). Rules are evaluated in a
fixed order and short-circuit:

1. The region is excluded: not included.
2. The account is excluded: not included.
3. The account is named explicitly and its OU is not ignored: included.
4. The account's OU, or one of its ancestors, is targeted (or the target
   holds the ``Root`` sentinel) and the OU is not ignored: included.
5. Anything else: not included.

An ignored OU wins over an explicitly named account. Operators use OU
ignore to fence off part of the organization entirely, so naming one of its
accounts does not bring it back into scope.
"""

import logging
from typing import Iterable, List, Set

from .directory import AccountDirectory, OrganizationDirectory
from .models import ROOT_OU, DeploymentTargets

logger = logging.getLogger(__name__)


def validate_deployment_target(
    target: DeploymentTargets,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> None:
    """Check every account and OU the target names.

    Raises:
        ScopeConfigurationError: If an account or OU name is unknown
    """
    for name in [*target.accounts, *target.excluded_accounts]:
        accounts.get_account(name)
    for path in target.organizational_units:
        organization.require_ou(path)


def _resolve_account_ids(names: Iterable[str], accounts: AccountDirectory) -> Set[str]:
    ids = set()
    for name in names:
        account_id = accounts.find_account_id(name)
        if account_id:
            ids.add(account_id)
    return ids


def _matches_account(
    target: DeploymentTargets,
    account_id: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> bool:
    if account_id in _resolve_account_ids(target.excluded_accounts, accounts):
        return False

    account = accounts.get_account_by_id(account_id)
    if account is None:
        logger.debug(f"Account id {account_id} is not in the account directory")
        return False

    ou_ignored = organization.is_ignored(account.organizational_unit)

    if account_id in _resolve_account_ids(target.accounts, accounts) and not ou_ignored:
        return True

    if ou_ignored:
        return False
    if ROOT_OU in target.organizational_units:
        return True
    targeted_ous = set(target.organizational_units)
    return any(
        path in targeted_ous for path in organization.ancestors(account.organizational_unit)
    )


def is_included(
    target: DeploymentTargets,
    region: str,
    account_id: str,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> bool:
    """Return True when the target selects the account in the region.

    Args:
        target: Scope expression of the configuration item
        region: Candidate region
        account_id: Candidate account id
        accounts: Account directory for name resolution
        organization: OU directory for membership and ignore state

    Returns:
        True if included, False otherwise

    Raises:
        ScopeConfigurationError: If the target names an unknown account or OU
    """
    validate_deployment_target(target, accounts, organization)

    if region in target.excluded_regions:
        return False
    return _matches_account(target, account_id, accounts, organization)


def get_account_ids_from_deployment_target(
    target: DeploymentTargets,
    accounts: AccountDirectory,
    organization: OrganizationDirectory,
) -> List[str]:
    """Enumerate every account id the target selects, in directory order.

    Region exclusions do not apply here; combine with
    get_regions_from_deployment_target for full (account, region) pairs.
    """
    validate_deployment_target(target, accounts, organization)
    return [
        account_id
        for account_id in accounts.all_account_ids()
        if _matches_account(target, account_id, accounts, organization)
    ]


def get_regions_from_deployment_target(
    target: DeploymentTargets, enabled_regions: Iterable[str]
) -> List[str]:
    """Enabled regions that the target does not exclude."""
    excluded = set(target.excluded_regions)
    return [region for region in enabled_regions if region not in excluded]
