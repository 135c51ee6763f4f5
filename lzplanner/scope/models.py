"""
Scope models for accounts, organizational units and deployment targets.

Loaded once per run from YAML and frozen afterwards. Account and OU names are
the identities used by deployment targets; account ids are resolved from the
account email through the ``account_ids`` list.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Organization root sentinel, valid both as an OU reference and as the OU of
# the management account.
ROOT_OU = "Root"

ACCOUNT_ID_PATTERN = re.compile(r"^\d{12}$")


class AccountConfig(BaseModel):
    """A single account in the landing zone."""

    name: str = Field(min_length=1, description="Unique logical account name")
    email: str = Field(min_length=3, description="Account root email address")
    organizational_unit: str = Field(
        min_length=1, description="OU path such as 'Sandbox/Development' or 'Root'"
    )
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class AccountIdConfig(BaseModel):
    """Maps an account email to its provisioned account id."""

    email: str = Field(min_length=3)
    account_id: str
    status: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("account_id", mode="before")
    @classmethod
    def validate_account_id(cls, v: object) -> str:
        """Accept ints from YAML and enforce the 12-digit format."""
        value = str(v).zfill(12) if isinstance(v, int) else str(v)
        if not ACCOUNT_ID_PATTERN.match(value):
            raise ValueError(f"account_id must be 12 digits, got '{v}'")
        return value


class AccountsConfig(BaseModel):
    """Accounts configuration (accounts-config.yaml)."""

    mandatory_accounts: List[AccountConfig] = Field(default_factory=list)
    workload_accounts: List[AccountConfig] = Field(default_factory=list)
    account_ids: List[AccountIdConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_unique_accounts(self) -> "AccountsConfig":
        """Account names and emails must be unique across both lists."""
        names: set = set()
        emails: set = set()
        for account in self.all_accounts:
            if account.name in names:
                raise ValueError(f"Duplicate account name '{account.name}'")
            email = account.email.lower()
            if email in emails:
                raise ValueError(f"Duplicate account email '{account.email}'")
            names.add(account.name)
            emails.add(email)

        account_ids: set = set()
        for item in self.account_ids:
            if item.account_id in account_ids:
                raise ValueError(f"Duplicate account id '{item.account_id}'")
            account_ids.add(item.account_id)
        return self

    @property
    def all_accounts(self) -> List[AccountConfig]:
        return [*self.mandatory_accounts, *self.workload_accounts]


class OrganizationalUnitConfig(BaseModel):
    """An organizational unit, named by its full path."""

    name: str = Field(min_length=1, description="Slash separated OU path")
    ignore: bool = Field(
        default=False,
        description="Exclude this OU and everything below it from all targets",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject empty path segments and the root sentinel."""
        if v == ROOT_OU:
            raise ValueError(f"'{ROOT_OU}' is reserved for the organization root")
        if any(not part for part in v.split("/")):
            raise ValueError(f"Invalid OU path '{v}'")
        return v


class OrganizationConfig(BaseModel):
    """Organization configuration (organization-config.yaml)."""

    enable: bool = True
    organizational_units: List[OrganizationalUnitConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_tree(self) -> "OrganizationConfig":
        """OU paths are unique and every nested OU has a declared parent."""
        paths = [ou.name for ou in self.organizational_units]
        seen: set = set()
        for path in paths:
            if path in seen:
                raise ValueError(f"Duplicate organizational unit '{path}'")
            seen.add(path)
        for path in paths:
            if "/" in path:
                parent = path.rsplit("/", 1)[0]
                if parent not in seen:
                    raise ValueError(
                        f"Organizational unit '{path}' has undeclared parent '{parent}'"
                    )
        return self


class DeploymentTargets(BaseModel):
    """Include/exclude scope expression attached to a configuration item.

    Exclusions always take precedence over inclusions.
    """

    accounts: List[str] = Field(default_factory=list)
    excluded_accounts: List[str] = Field(default_factory=list)
    organizational_units: List[str] = Field(default_factory=list)
    excluded_regions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)
