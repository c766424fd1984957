"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
The JSON Schema in :mod:`acmechallenge.config.loader` only checks
shapes; these builders are what the library actually reads.

Access pattern::

    from acmechallenge.config import load_settings

    settings = load_settings("acme.yaml")
    settings.challenges.enabled    # typed, IDE-autocompleted
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChallengeSettings:
    """Which challenge classes the registry knows about."""

    enabled: tuple[str, ...]
    extensions: tuple[str, ...]


def _build_challenges(data: dict | None) -> ChallengeSettings:
    d = data or {}
    return ChallengeSettings(
        enabled=tuple(d.get("enabled", ("http-01", "dns-01", "tls-alpn-01"))),
        extensions=tuple(d.get("extensions", ())),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Library logging configuration (level, format)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "text"),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    challenges: ChallengeSettings
    logging: LoggingSettings


def build_settings(data: dict | None) -> Settings:
    """Build the typed settings tree from a (validated) config dict."""
    d = data or {}
    return Settings(
        challenges=_build_challenges(d.get("challenges")),
        logging=_build_logging(d.get("logging")),
    )
