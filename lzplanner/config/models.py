"""
Configuration models for the planner.

Two families live here:

- ``PlannerSettings``: how the planner itself runs (unit naming prefix,
  worker count, logging, output format). Loaded by ``SettingsLoader``.
- The landing-zone documents that describe the target topology
  (global, customizations) plus ``LandingZoneConfig``, the frozen bundle of
  every document loaded from a configuration directory.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..network.models import NetworkConfig
from ..scope.models import AccountsConfig, DeploymentTargets, OrganizationConfig


class OutputFormat(str, Enum):
    """Output format for compiled plans."""

    TABLE = "table"
    JSON = "json"


class PlannerSettings(BaseModel):
    """Runtime settings for the planner."""

    unit_prefix: str = Field(
        default="LandingZone",
        pattern=r"^[A-Za-z][A-Za-z0-9-]*$",
        description="Prefix for generated deployment unit names",
    )
    incremental_units: bool = Field(
        default=True,
        description="Carve new resources into narrow units; when false the "
        "legacy units own everything",
    )
    max_workers: Annotated[int, Field(gt=0, le=64)] = Field(
        default=4,
        description="Concurrent (account, region) compilations",
    )
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    output_format: OutputFormat = Field(default=OutputFormat.TABLE)
    inventory_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding <account_id>/<region> inventory snapshots",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


class GlobalConfig(BaseModel):
    """Global configuration (global-config.yaml)."""

    home_region: str
    enabled_regions: List[str] = Field(min_length=1)
    management_account_access_role: str = "AWSControlTowerExecution"

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_home_region(self) -> "GlobalConfig":
        if self.home_region not in self.enabled_regions:
            raise ValueError(
                f"home_region '{self.home_region}' must be one of enabled_regions"
            )
        if len(set(self.enabled_regions)) != len(self.enabled_regions):
            raise ValueError("enabled_regions contains duplicates")
        return self


class CustomStackConfig(BaseModel):
    """An operator-declared custom deployment unit."""

    name: str = Field(pattern=r"^[A-Za-z][A-Za-z0-9-]*$")
    description: Optional[str] = None
    template: str = Field(min_length=1, description="Template file reference")
    run_order: int = Field(default=1)
    regions: List[str] = Field(default_factory=lambda: ["us-east-1"], min_length=1)
    termination_protection: bool = False
    parameters: Dict[str, str] = Field(default_factory=dict)
    deployment_targets: DeploymentTargets
    depends_on: List[str] = Field(
        default_factory=list,
        description="Names of custom stacks that must complete first",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class CustomizationsConfig(BaseModel):
    """Customizations configuration (customizations-config.yaml)."""

    custom_stacks: List[CustomStackConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_unique_names(self) -> "CustomizationsConfig":
        names = [stack.name for stack in self.custom_stacks]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate custom stack names: {', '.join(duplicates)}")
        return self


class LandingZoneConfig(BaseModel):
    """Every landing-zone document, loaded and frozen."""

    global_config: GlobalConfig
    accounts: AccountsConfig
    organization: OrganizationConfig = Field(default_factory=OrganizationConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    customizations: CustomizationsConfig = Field(default_factory=CustomizationsConfig)

    model_config = ConfigDict(extra="forbid", frozen=True)
