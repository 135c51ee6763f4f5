"""
Tests for deployment target resolution.

Tests cover:
- Ordered evaluation of region/account exclusions and inclusions
- OU membership through ancestors and the Root sentinel
- OU ignore overriding explicit account inclusion
- Fail-fast on unknown account and OU names
- Enumeration of target account ids and regions
"""

import pytest
from conftest import (
    AUDIT_ID,
    DEV_ID,
    LOG_ARCHIVE_ID,
    MANAGEMENT_ID,
    NETWORK_ID,
    SANDBOX_ID,
)

from lzplanner.exceptions import ScopeConfigurationError
from lzplanner.scope import (
    AccountDirectory,
    AccountsConfig,
    DeploymentTargets,
    OrganizationConfig,
    OrganizationDirectory,
    get_account_ids_from_deployment_target,
    get_regions_from_deployment_target,
    is_included,
)


class TestExclusions:
    """Exclusions are evaluated first and always win."""

    def test_excluded_region_wins_over_root(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"], excluded_regions=["eu-west-1"])

        assert is_included(target, "us-east-1", DEV_ID, accounts, organization)
        assert not is_included(target, "eu-west-1", DEV_ID, accounts, organization)

    def test_excluded_account_wins_over_explicit_include(self, accounts, organization):
        target = DeploymentTargets(accounts=["Dev1"], excluded_accounts=["Dev1"])

        assert not is_included(target, "us-east-1", DEV_ID, accounts, organization)

    def test_excluded_account_wins_over_ou_include(self, accounts, organization):
        target = DeploymentTargets(
            organizational_units=["Security"], excluded_accounts=["Audit"]
        )

        assert is_included(target, "us-east-1", LOG_ARCHIVE_ID, accounts, organization)
        assert not is_included(target, "us-east-1", AUDIT_ID, accounts, organization)


class TestInclusions:
    """Explicit accounts, OU membership and the Root sentinel."""

    def test_explicit_account(self, accounts, organization):
        target = DeploymentTargets(accounts=["Network"])

        assert is_included(target, "us-east-1", NETWORK_ID, accounts, organization)
        assert not is_included(target, "us-east-1", DEV_ID, accounts, organization)

    def test_ou_membership(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Security"])

        assert is_included(target, "us-east-1", LOG_ARCHIVE_ID, accounts, organization)
        assert is_included(target, "us-east-1", AUDIT_ID, accounts, organization)
        assert not is_included(target, "us-east-1", NETWORK_ID, accounts, organization)

    def test_ancestor_ou_includes_nested_account(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Workloads"])

        assert is_included(target, "us-east-1", DEV_ID, accounts, organization)

    def test_nested_ou_does_not_include_parent_members(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Workloads/Dev"])

        assert is_included(target, "us-east-1", DEV_ID, accounts, organization)
        assert not is_included(target, "us-east-1", NETWORK_ID, accounts, organization)

    def test_root_sentinel_includes_management_account(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"])

        assert is_included(target, "us-east-1", MANAGEMENT_ID, accounts, organization)

    def test_empty_target_is_implicit_deny(self, accounts, organization):
        assert not is_included(
            DeploymentTargets(), "us-east-1", NETWORK_ID, accounts, organization
        )

    def test_unknown_candidate_account_is_never_included(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"])

        assert not is_included(target, "us-east-1", "999999999999", accounts, organization)


class TestOrganizationalUnitIgnore:
    """An ignored OU is excluded even when its accounts are named explicitly."""

    def test_explicit_account_in_ignored_ou_is_excluded(self, accounts, organization):
        target = DeploymentTargets(accounts=["Sandbox1"])

        assert not is_included(target, "us-east-1", SANDBOX_ID, accounts, organization)

    def test_root_sentinel_does_not_reinclude_ignored_ou(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"])

        assert not is_included(target, "us-east-1", SANDBOX_ID, accounts, organization)

    def test_ignored_ou_listed_directly_is_excluded(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Sandbox"])

        assert not is_included(target, "us-east-1", SANDBOX_ID, accounts, organization)

    def test_ignored_ancestor_excludes_descendants(self, accounts_config):
        organization = OrganizationDirectory(
            OrganizationConfig(
                organizational_units=[
                    {"name": "Security"},
                    {"name": "Infrastructure"},
                    {"name": "Workloads", "ignore": True},
                    {"name": "Workloads/Dev"},
                    {"name": "Sandbox"},
                ]
            )
        )
        accounts = AccountDirectory(accounts_config)
        target = DeploymentTargets(accounts=["Dev1"], organizational_units=["Workloads/Dev"])

        assert not is_included(target, "us-east-1", DEV_ID, accounts, organization)


class TestUnknownNames:
    """Targets naming unknown accounts or OUs fail fast."""

    def test_unknown_account(self, accounts, organization):
        target = DeploymentTargets(accounts=["Ghost"])

        with pytest.raises(ScopeConfigurationError) as exc_info:
            is_included(target, "us-east-1", NETWORK_ID, accounts, organization)

        assert exc_info.value.context["account"] == "Ghost"
        assert exc_info.value.error_code == "SCOPE_CONFIGURATION_ERROR"

    def test_unknown_excluded_account(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"], excluded_accounts=["Ghost"])

        with pytest.raises(ScopeConfigurationError):
            is_included(target, "us-east-1", NETWORK_ID, accounts, organization)

    def test_unknown_ou_fails_even_when_region_is_excluded(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Nope"], excluded_regions=["us-east-1"])

        with pytest.raises(ScopeConfigurationError) as exc_info:
            is_included(target, "us-east-1", NETWORK_ID, accounts, organization)

        assert exc_info.value.context["organizational_unit"] == "Nope"


class TestScenario:
    """Two accounts in sibling OUs, target naming one OU."""

    def test_only_account_in_targeted_ou_is_included(self):
        accounts = AccountDirectory(
            AccountsConfig(
                workload_accounts=[
                    {"name": "A1", "email": "a1@example.com", "organizational_unit": "Infra"},
                    {"name": "A2", "email": "a2@example.com", "organizational_unit": "Workloads"},
                ],
                account_ids=[
                    {"email": "a1@example.com", "account_id": "000000000001"},
                    {"email": "a2@example.com", "account_id": "000000000002"},
                ],
            )
        )
        organization = OrganizationDirectory(
            OrganizationConfig(organizational_units=[{"name": "Infra"}, {"name": "Workloads"}])
        )
        target = DeploymentTargets(organizational_units=["Infra"], excluded_accounts=[])

        assert is_included(target, "us-east-1", "000000000001", accounts, organization)
        assert not is_included(target, "us-east-1", "000000000002", accounts, organization)


class TestTargetEnumeration:
    """Listing every account and region a target selects."""

    def test_root_lists_every_account_outside_ignored_ous(self, accounts, organization):
        target = DeploymentTargets(organizational_units=["Root"])

        assert get_account_ids_from_deployment_target(target, accounts, organization) == [
            MANAGEMENT_ID,
            LOG_ARCHIVE_ID,
            AUDIT_ID,
            NETWORK_ID,
            DEV_ID,
        ]

    def test_combines_accounts_and_ous_minus_exclusions(self, accounts, organization):
        target = DeploymentTargets(
            accounts=["Network"],
            organizational_units=["Security"],
            excluded_accounts=["LogArchive"],
        )

        assert get_account_ids_from_deployment_target(target, accounts, organization) == [
            AUDIT_ID,
            NETWORK_ID,
        ]

    def test_regions_exclude_excluded_regions(self):
        target = DeploymentTargets(excluded_regions=["eu-west-1"])

        assert get_regions_from_deployment_target(
            target, ["us-east-1", "eu-west-1", "ap-southeast-2"]
        ) == ["us-east-1", "ap-southeast-2"]
