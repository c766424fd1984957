"""Configuration subsystem.

Public API::

    from acmechallenge.config import load_settings

    settings = load_settings("acme.yaml")
    registry = ChallengeRegistry(settings.challenges)
    configure_logging(settings.logging)
"""

from acmechallenge.config.loader import (
    ConfigValidationError,
    load_settings,
    load_settings_from_dict,
    validate_config,
)
from acmechallenge.config.settings import (
    ChallengeSettings,
    LoggingSettings,
    Settings,
    build_settings,
)

__all__ = [
    "ChallengeSettings",
    "ConfigValidationError",
    "LoggingSettings",
    "Settings",
    "build_settings",
    "load_settings",
    "load_settings_from_dict",
    "validate_config",
]
