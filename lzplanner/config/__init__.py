"""
Configuration management for the planner.

Provides type-safe loading and validation of planner settings and of the
landing-zone documents that describe the target topology.
"""

from ..exceptions import ConfigError
from .loader import SettingsLoader, load_landing_zone_config, load_settings
from .models import (
    CustomizationsConfig,
    CustomStackConfig,
    GlobalConfig,
    LandingZoneConfig,
    OutputFormat,
    PlannerSettings,
)

__all__ = [
    "ConfigError",
    "CustomStackConfig",
    "CustomizationsConfig",
    "GlobalConfig",
    "LandingZoneConfig",
    "OutputFormat",
    "PlannerSettings",
    "SettingsLoader",
    "load_landing_zone_config",
    "load_settings",
]
