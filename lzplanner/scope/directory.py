"""Lookup directories over the account and organization configuration."""

import logging
from typing import Dict, List, Optional

from ..exceptions import ScopeConfigurationError
from .models import ROOT_OU, AccountConfig, AccountsConfig, OrganizationConfig

logger = logging.getLogger(__name__)


class AccountDirectory:
    """Resolves account names, emails and ids.

    Account ids are known through the ``account_ids`` list, keyed by email.
    An account without an id entry has not been provisioned yet; it can be
    named in targets but never matches a candidate account id.
    """

    def __init__(self, config: AccountsConfig):
        self._accounts: List[AccountConfig] = config.all_accounts
        self._by_name: Dict[str, AccountConfig] = {a.name: a for a in self._accounts}
        self._ids_by_email: Dict[str, str] = {
            item.email.lower(): item.account_id for item in config.account_ids
        }
        self._by_id: Dict[str, AccountConfig] = {}
        for account in self._accounts:
            account_id = self._ids_by_email.get(account.email.lower())
            if account_id:
                self._by_id[account_id] = account

    def has_account(self, name: str) -> bool:
        return name in self._by_name

    def get_account(self, name: str) -> AccountConfig:
        """Return the account with the given name.

        Raises:
            ScopeConfigurationError: If no account has that name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise ScopeConfigurationError(
                f"Unknown account '{name}'", account=name
            ) from None

    def get_account_id(self, name: str) -> str:
        """Resolve an account name to its id through the account email.

        Raises:
            ScopeConfigurationError: If the account is unknown or has no id
        """
        account = self.get_account(name)
        account_id = self._ids_by_email.get(account.email.lower())
        if account_id is None:
            raise ScopeConfigurationError(
                f"Account '{name}' has no account id for email '{account.email}'",
                account=name,
            )
        return account_id

    def find_account_id(self, name: str) -> Optional[str]:
        """Like get_account_id, but None for a known account without an id."""
        account = self.get_account(name)
        return self._ids_by_email.get(account.email.lower())

    def get_account_by_id(self, account_id: str) -> Optional[AccountConfig]:
        return self._by_id.get(account_id)

    def get_account_name_by_id(self, account_id: str) -> Optional[str]:
        account = self._by_id.get(account_id)
        return account.name if account else None

    def all_account_ids(self) -> List[str]:
        """Account ids in declaration order, mandatory accounts first."""
        ids = []
        for account in self._accounts:
            account_id = self._ids_by_email.get(account.email.lower())
            if account_id:
                ids.append(account_id)
        return ids

    def account_ids_in_ou(self, ou_path: str) -> List[str]:
        """Ids of accounts in the OU or any OU below it."""
        if ou_path == ROOT_OU:
            return self.all_account_ids()
        prefix = f"{ou_path}/"
        return [
            account_id
            for account_id in self.all_account_ids()
            if self._by_id[account_id].organizational_unit == ou_path
            or self._by_id[account_id].organizational_unit.startswith(prefix)
        ]


class OrganizationDirectory:
    """Resolves OU paths, their ancestors and their ignore state."""

    def __init__(self, config: OrganizationConfig):
        self._ignored: Dict[str, bool] = {
            ou.name: ou.ignore for ou in config.organizational_units
        }

    def has_ou(self, path: str) -> bool:
        return path == ROOT_OU or path in self._ignored

    def require_ou(self, path: str) -> str:
        """Return the path if the OU is declared.

        Raises:
            ScopeConfigurationError: If the OU is not declared
        """
        if not self.has_ou(path):
            raise ScopeConfigurationError(
                f"Unknown organizational unit '{path}'", organizational_unit=path
            )
        return path

    def parent(self, path: str) -> Optional[str]:
        if path == ROOT_OU:
            return None
        if "/" not in path:
            return ROOT_OU
        return path.rsplit("/", 1)[0]

    def ancestors(self, path: str) -> List[str]:
        """The OU itself followed by each ancestor, nearest first.

        The organization root is not included.
        """
        if path == ROOT_OU:
            return [ROOT_OU]
        parts = path.split("/")
        return ["/".join(parts[:i]) for i in range(len(parts), 0, -1)]

    def is_ignored(self, path: str) -> bool:
        """True when the OU or any of its ancestors is marked ignored."""
        if path == ROOT_OU:
            return False
        return any(self._ignored.get(p, False) for p in self.ancestors(path))


def validate_scope_configuration(
    organization: OrganizationDirectory, config: AccountsConfig
) -> None:
    """Every account must live in a declared OU.

    Raises:
        ScopeConfigurationError: On the first account with an unknown OU
    """
    for account in config.all_accounts:
        if not organization.has_ou(account.organizational_unit):
            raise ScopeConfigurationError(
                f"Account '{account.name}' references unknown organizational unit "
                f"'{account.organizational_unit}'",
                account=account.name,
                organizational_unit=account.organizational_unit,
            )
    logger.debug(f"Validated {len(config.all_accounts)} account OU references")
