"""
Configuration loaders.

Planner settings are merged from multiple sources with proper priority:
CLI Args > Environment Variables > Config File > Defaults

Landing-zone documents are read from a configuration directory, one YAML
file per document, and validated into a frozen ``LandingZoneConfig``.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import LandingZoneConfig, PlannerSettings

GLOBAL_CONFIG_FILE = "global-config.yaml"
ACCOUNTS_CONFIG_FILE = "accounts-config.yaml"
ORGANIZATION_CONFIG_FILE = "organization-config.yaml"
NETWORK_CONFIG_FILE = "network-config.yaml"
CUSTOMIZATIONS_CONFIG_FILE = "customizations-config.yaml"

# Document key -> (file name, required)
LANDING_ZONE_FILES: Dict[str, tuple] = {
    "global_config": (GLOBAL_CONFIG_FILE, True),
    "accounts": (ACCOUNTS_CONFIG_FILE, True),
    "organization": (ORGANIZATION_CONFIG_FILE, False),
    "network": (NETWORK_CONFIG_FILE, False),
    "customizations": (CUSTOMIZATIONS_CONFIG_FILE, False),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Raises:
        ConfigError: If the file cannot be read, parsed, or is not a mapping
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", path=str(path), cause=e) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read config file {path}: {e}", path=str(path), cause=e
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}", path=str(path))
    return data


class SettingsLoader:
    """
    Loads and merges planner settings from multiple sources.

    Priority order (highest to lowest):
    1. CLI arguments (passed directly to merge_cli_args)
    2. Environment variables (LZP_*)
    3. Configuration file
    4. Default values
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "landing-zone-planner"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "planner.yaml"
    ENV_PREFIX = "LZP_"
    CONFIG_PATH_ENV = "LZP_CONFIG_PATH"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings loader.

        Args:
            config_path: Path to settings file. If None, uses default location.
        """
        self.config_path = config_path or self._get_config_path_from_env()

    @classmethod
    def _get_config_path_from_env(cls) -> Path:
        """Get settings path from environment variable or default."""
        env_path = os.environ.get(cls.CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path).expanduser()
        return cls.DEFAULT_CONFIG_FILE

    def load(self) -> PlannerSettings:
        """
        Load settings from all sources and merge.

        Returns:
            Validated PlannerSettings object

        Raises:
            ConfigError: If settings are invalid
        """
        try:
            config_dict: dict[str, Any] = {}

            if self.config_path.exists():
                file_config = _read_yaml(self.config_path)
                config_dict = self._deep_merge(config_dict, file_config)

            env_config = self._load_from_env()
            config_dict = self._deep_merge(config_dict, env_config)

            return PlannerSettings.model_validate(config_dict)

        except ConfigError:
            raise
        except ValidationError as e:
            raise ConfigError(
                f"Settings validation failed: {e}", path=str(self.config_path), cause=e
            ) from e

    def _load_from_env(self) -> dict[str, Any]:
        """
        Load settings from environment variables.

        Environment variable format:
        - LZP_UNIT_PREFIX
        - LZP_MAX_WORKERS
        - LZP_INCREMENTAL_UNITS

        Double underscore (__) separates nested keys. LZP_CONFIG_PATH selects
        the settings file and is not itself a setting.

        Returns:
            Settings dictionary
        """
        config: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX) or key == self.CONFIG_PATH_ENV:
                continue

            config_key = key[len(self.ENV_PREFIX) :].lower()
            parts = config_key.split("__")

            current = config
            for part in parts[:-1]:
                if part not in current:
                    current[part] = {}
                current = current[part]

            current[parts[-1]] = self._convert_env_value(value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """
        Convert environment variable string to appropriate type.

        Args:
            value: Environment variable value as string

        Returns:
            Converted value (bool, int, float, or str)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def _deep_merge(
        self, base: dict[str, Any], update: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary
            update: Dictionary with updates

        Returns:
            Merged dictionary (base is not modified)
        """
        result = base.copy()

        for key, value in update.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def merge_cli_args(
        self,
        settings: PlannerSettings,
        cli_args: dict[str, Any],
    ) -> PlannerSettings:
        """
        Merge CLI arguments into settings.

        CLI arguments have highest priority and override all other sources.

        Args:
            settings: Base settings
            cli_args: CLI arguments to merge (non-None values only)

        Returns:
            New PlannerSettings with CLI args applied
        """
        filtered_args = self._filter_none_values(cli_args)

        if not filtered_args:
            return settings

        config_dict = settings.model_dump()
        config_dict = self._deep_merge(config_dict, filtered_args)

        try:
            return PlannerSettings.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid command line settings: {e}", cause=e) from e

    def _filter_none_values(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively filter out None values from a dictionary."""
        result = {}
        for key, value in data.items():
            if value is None:
                continue
            elif isinstance(value, dict):
                filtered = self._filter_none_values(value)
                if filtered:
                    result[key] = filtered
            else:
                result[key] = value
        return result


def load_settings(
    config_path: Optional[Path] = None,
    cli_args: Optional[dict[str, Any]] = None,
) -> PlannerSettings:
    """
    Convenience function to load planner settings.

    Args:
        config_path: Path to settings file
        cli_args: CLI arguments to merge (highest priority)

    Returns:
        Validated PlannerSettings object

    Raises:
        ConfigError: If settings are invalid
    """
    loader = SettingsLoader(config_path)
    settings = loader.load()

    if cli_args:
        settings = loader.merge_cli_args(settings, cli_args)

    return settings


def load_landing_zone_config(config_dir: Path) -> LandingZoneConfig:
    """
    Load every landing-zone document from a configuration directory.

    Args:
        config_dir: Directory holding global, accounts, organization, network
            and customizations YAML files

    Returns:
        Validated, frozen LandingZoneConfig

    Raises:
        ConfigError: If a required file is missing or any document is invalid
    """
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        raise ConfigError(
            f"Configuration directory {config_dir} does not exist", path=str(config_dir)
        )

    documents: dict[str, Any] = {}
    for key, (file_name, required) in LANDING_ZONE_FILES.items():
        path = config_dir / file_name
        if not path.exists():
            if required:
                raise ConfigError(
                    f"Required configuration file {file_name} is missing",
                    path=str(path),
                )
            continue
        documents[key] = _read_yaml(path)

    try:
        return LandingZoneConfig.model_validate(documents)
    except ValidationError as e:
        raise ConfigError(
            f"Landing zone configuration validation failed: {e}",
            path=str(config_dir),
            cause=e,
        ) from e
