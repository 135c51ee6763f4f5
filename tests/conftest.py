from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import yaml

from lzplanner.compiler.models import CompilationContext
from lzplanner.config.models import LandingZoneConfig, PlannerSettings
from lzplanner.scope.directory import AccountDirectory, OrganizationDirectory
from lzplanner.scope.models import AccountsConfig, OrganizationConfig

MANAGEMENT_ID = "111111111111"
LOG_ARCHIVE_ID = "222222222222"
AUDIT_ID = "333333333333"
NETWORK_ID = "444444444444"
DEV_ID = "555555555555"
SANDBOX_ID = "666666666666"
HOME_REGION = "us-east-1"


# ============================================================================
# Scope Fixtures
# ============================================================================


def accounts_document() -> Dict[str, Any]:
    return {
        "mandatory_accounts": [
            {"name": "Management", "email": "management@example.com", "organizational_unit": "Root"},
            {"name": "LogArchive", "email": "log-archive@example.com", "organizational_unit": "Security"},
            {"name": "Audit", "email": "audit@example.com", "organizational_unit": "Security"},
        ],
        "workload_accounts": [
            {"name": "Network", "email": "network@example.com", "organizational_unit": "Infrastructure"},
            {"name": "Dev1", "email": "dev1@example.com", "organizational_unit": "Workloads/Dev"},
            {"name": "Sandbox1", "email": "sandbox1@example.com", "organizational_unit": "Sandbox"},
        ],
        "account_ids": [
            {"email": "management@example.com", "account_id": MANAGEMENT_ID},
            {"email": "log-archive@example.com", "account_id": LOG_ARCHIVE_ID},
            {"email": "audit@example.com", "account_id": AUDIT_ID},
            {"email": "Network@Example.com", "account_id": NETWORK_ID},
            {"email": "dev1@example.com", "account_id": DEV_ID},
            {"email": "sandbox1@example.com", "account_id": SANDBOX_ID},
        ],
    }


def organization_document() -> Dict[str, Any]:
    return {
        "organizational_units": [
            {"name": "Security"},
            {"name": "Infrastructure"},
            {"name": "Workloads"},
            {"name": "Workloads/Dev"},
            {"name": "Sandbox", "ignore": True},
        ]
    }


def central_vpc(**overrides: Any) -> Dict[str, Any]:
    vpc = {
        "kind": "vpc",
        "name": "Central",
        "account": "Network",
        "region": HOME_REGION,
        "cidrs": ["10.0.0.0/16", "10.1.0.0/16"],
        "internet_gateway": True,
        "route_tables": [
            {
                "name": "public",
                "gateway_associations": ["internetGateway"],
                "routes": [
                    {"name": "default", "type": "internetGateway", "destination": "0.0.0.0/0"}
                ],
            }
        ],
        "security_groups": [{"name": "web"}],
        "subnets": [
            {"name": "public-a", "route_table": "public"},
            {
                "name": "shared-a",
                "share_targets": {"organizational_units": ["Workloads"]},
            },
        ],
        "network_acls": [
            {
                "name": "default-acl",
                "subnet_associations": ["public-a"],
                "inbound_rules": [{"rule": 100, "action": "allow", "cidr": "0.0.0.0/0"}],
            }
        ],
        "load_balancers": {
            "network_load_balancers": [{"name": "ingress", "subnets": ["public-a"]}]
        },
    }
    vpc.update(overrides)
    return vpc


def spoke_template(**overrides: Any) -> Dict[str, Any]:
    template = {
        "kind": "vpc_template",
        "name": "Spoke",
        "region": HOME_REGION,
        "deployment_targets": {"organizational_units": ["Workloads"]},
        "cidrs": ["10.10.0.0/16"],
        "subnets": [{"name": "app-a"}],
    }
    template.update(overrides)
    return template


def landing_zone_document(
    vpcs: Optional[List[Dict[str, Any]]] = None,
    custom_stacks: Optional[List[Dict[str, Any]]] = None,
    **network: Any,
) -> Dict[str, Any]:
    return {
        "global_config": {
            "home_region": HOME_REGION,
            "enabled_regions": [HOME_REGION, "eu-west-1"],
        },
        "accounts": accounts_document(),
        "organization": organization_document(),
        "network": {"vpcs": [central_vpc(), spoke_template()] if vpcs is None else vpcs, **network},
        "customizations": {"custom_stacks": custom_stacks or []},
    }


@pytest.fixture
def accounts_config() -> AccountsConfig:
    return AccountsConfig.model_validate(accounts_document())


@pytest.fixture
def organization_config() -> OrganizationConfig:
    return OrganizationConfig.model_validate(organization_document())


@pytest.fixture
def accounts(accounts_config: AccountsConfig) -> AccountDirectory:
    return AccountDirectory(accounts_config)


@pytest.fixture
def organization(organization_config: OrganizationConfig) -> OrganizationDirectory:
    return OrganizationDirectory(organization_config)


# ============================================================================
# Compilation Fixtures
# ============================================================================


@pytest.fixture
def make_context() -> Callable[..., CompilationContext]:
    """Factory building a CompilationContext from document overrides."""

    def _make(settings: Optional[Dict[str, Any]] = None, **kwargs: Any) -> CompilationContext:
        config = LandingZoneConfig.model_validate(landing_zone_document(**kwargs))
        return CompilationContext(
            config=config, settings=PlannerSettings.model_validate(settings or {})
        )

    return _make


@pytest.fixture
def write_config_dir(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing landing zone documents as YAML files."""

    def _write(**kwargs: Any) -> Path:
        document = landing_zone_document(**kwargs)
        config_dir = tmp_path / "config"
        config_dir.mkdir(exist_ok=True)
        files = {
            "global_config": "global-config.yaml",
            "accounts": "accounts-config.yaml",
            "organization": "organization-config.yaml",
            "network": "network-config.yaml",
            "customizations": "customizations-config.yaml",
        }
        for key, file_name in files.items():
            (config_dir / file_name).write_text(yaml.safe_dump(document[key]))
        return config_dir

    return _write
