"""YAML configuration loader.

Reads a YAML file, validates the result against a JSON Schema and
builds the frozen :class:`Settings` tree.  When asked to, it first
resolves ``${VAR}`` / ``${VAR:-default}`` references against the
environment.

Example file, loaded with ``resolve_env=True``::

    challenges:
      enabled: [http-01, dns-01]
      extensions:
        - mycompany.acme.challenges.Dns02Challenge
    logging:
      level: ${ACME_LOG_LEVEL:-INFO}
      format: json
"""

from __future__ import annotations

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from acmechallenge.config.settings import Settings, build_settings

log = logging.getLogger(__name__)

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

_KNOWN_CHALLENGE_TYPES = ("http-01", "dns-01", "tls-alpn-01")

_CLASS_PATH_PATTERN = r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)+$"

SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "challenges": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "enabled": {
                    "type": "array",
                    "items": {"enum": list(_KNOWN_CHALLENGE_TYPES)},
                    "uniqueItems": True,
                },
                "extensions": {
                    "type": "array",
                    "items": {"type": "string", "pattern": _CLASS_PATH_PATTERN},
                    "uniqueItems": True,
                },
            },
        },
        "logging": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                },
                "format": {"enum": ["json", "text"]},
            },
        },
    },
}


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when the configuration has one or more problems."""

    def __init__(self, errors: list[str]) -> None:
        """Store *errors* and build a human-readable message."""
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _substitute(text: str, where: str) -> str:
    """Expand a whole-value ``${VAR}`` or ``${VAR:-default}`` reference."""
    ref = _ENV_RE.match(text)
    if ref is None:
        return text
    name, default = ref.groups()
    value = os.environ.get(name, default)
    if value is None:
        msg = f"'{where}' references environment variable '{name}', which is unset and has no default"
        raise ConfigValidationError([msg])
    return value


def _expand_env(node: Any, where: str = "") -> Any:  # noqa: ANN401
    """Return a copy of *node* with every string leaf passed through :func:`_substitute`."""
    if isinstance(node, str):
        return _substitute(node, where)
    if isinstance(node, dict):
        return {
            key: _expand_env(child, f"{where}.{key}" if where else str(key))
            for key, child in node.items()
        }
    if isinstance(node, list):
        return [_expand_env(child, f"{where}[{idx}]") for idx, child in enumerate(node)]
    return node


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_config(data: dict[str, Any]) -> None:
    """Check *data* against :data:`SCHEMA`, reporting every problem at once."""
    validator = Draft202012Validator(SCHEMA)
    errors = [
        f"{'.'.join(str(p) for p in err.absolute_path) or '(root)'}: {err.message}"
        for err in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    ]
    if errors:
        raise ConfigValidationError(errors)


def load_settings_from_dict(
    data: dict[str, Any] | None,
    *,
    resolve_env: bool = False,
) -> Settings:
    """Validate and build settings from a raw dict.

    *data* is never modified.  With *resolve_env* set, string values of
    the form ``${VAR}`` or ``${VAR:-default}`` are first replaced from
    the process environment; otherwise they are taken literally.
    """
    data = copy.deepcopy(data) if data else {}
    if resolve_env:
        data = _expand_env(data)
    validate_config(data)
    return build_settings(data)


def load_settings(config_file: str | Path, *, resolve_env: bool = False) -> Settings:
    """Load settings from a YAML (or JSON) file.

    *resolve_env* enables environment variable references, as for
    :func:`load_settings_from_dict`.

    Raises
    ------
    ConfigValidationError
        If the file cannot be read or parsed, or fails validation.

    """
    path = Path(config_file)
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"Cannot read config file '{path}': {exc}"
        raise ConfigValidationError([msg]) from exc
    except yaml.YAMLError as exc:
        msg = f"Cannot parse config file '{path}': {exc}"
        raise ConfigValidationError([msg]) from exc

    if data is not None and not isinstance(data, dict):
        msg = f"Config file '{path}' must contain a mapping at the top level"
        raise ConfigValidationError([msg])

    settings = load_settings_from_dict(data, resolve_env=resolve_env)
    log.debug("Loaded configuration from %s", path)
    return settings
