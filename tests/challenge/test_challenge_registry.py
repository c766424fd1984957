"""Tests for acmechallenge.challenge.registry.ChallengeRegistry."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from acmechallenge.challenge.base import Challenge
from acmechallenge.challenge.dns01 import Dns01Challenge
from acmechallenge.challenge.http01 import Http01Challenge
from acmechallenge.challenge.registry import BUILTIN_TYPES, ChallengeRegistry
from acmechallenge.challenge.tls_alpn01 import TlsAlpn01Challenge
from acmechallenge.challenge.token import TokenChallenge
from acmechallenge.core.types import ChallengeStatus
from acmechallenge.errors import AcmeFormatError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_settings(enabled: list[str], extensions: list[str] | None = None) -> SimpleNamespace:
    """Create a stand-in ChallengeSettings."""
    return SimpleNamespace(enabled=tuple(enabled), extensions=tuple(extensions or ()))


class _Dns02Challenge(TokenChallenge):
    """A made-up server-specific challenge type."""

    challenge_type = "dns-02"


class _OverrideHttp01(Http01Challenge):
    """Replacement class for a built-in type."""


class _MissingChallengeType(Challenge):
    """Never sets challenge_type."""


class _NotAChallenge:
    challenge_type = "x-01"


# ---------------------------------------------------------------------------
# Built-ins
# ---------------------------------------------------------------------------


class TestBuiltins:
    def test_default_registers_all_builtins(self):
        registry = ChallengeRegistry()
        assert sorted(registry.registered_types) == sorted(BUILTIN_TYPES)
        assert registry.get_class("http-01") is Http01Challenge
        assert registry.get_class("dns-01") is Dns01Challenge
        assert registry.get_class("tls-alpn-01") is TlsAlpn01Challenge

    def test_enabled_subset(self):
        registry = ChallengeRegistry(_make_settings(["dns-01"]))
        assert registry.registered_types == ["dns-01"]
        assert not registry.is_registered("http-01")

    def test_unknown_builtin_raises(self):
        with pytest.raises(ValueError, match="Unknown challenge type 'http-02'"):
            ChallengeRegistry(_make_settings(["http-02"]))

    def test_unknown_type_falls_back_to_generic(self):
        assert ChallengeRegistry().get_class("proprietary-xyz") is Challenge


# ---------------------------------------------------------------------------
# Extensions
# ---------------------------------------------------------------------------


class TestExtensions:
    @patch("acmechallenge.challenge.registry.importlib.import_module")
    def test_load_external(self, mock_import):
        mock_module = MagicMock()
        mock_module.Dns02Challenge = _Dns02Challenge
        mock_import.return_value = mock_module

        registry = ChallengeRegistry(
            _make_settings([], ["mycompany.acme.challenges.Dns02Challenge"]),
        )

        mock_import.assert_called_with("mycompany.acme.challenges")
        assert registry.get_class("dns-02") is _Dns02Challenge

    def test_external_not_fully_qualified(self):
        with pytest.raises(ValueError, match="must be fully qualified"):
            ChallengeRegistry(_make_settings([], ["Dns02Challenge"]))

    def test_external_missing_module(self):
        with pytest.raises(ModuleNotFoundError):
            ChallengeRegistry(_make_settings([], ["no_such_pkg_xyz.mod.Cls"]))

    @patch("acmechallenge.challenge.registry.importlib.import_module")
    def test_external_not_a_challenge(self, mock_import):
        mock_module = MagicMock()
        mock_module.Cls = _NotAChallenge
        mock_import.return_value = mock_module

        with pytest.raises(TypeError, match="must be a subclass of Challenge"):
            ChallengeRegistry(_make_settings([], ["pkg.mod.Cls"]))

    def test_register_missing_challenge_type(self):
        registry = ChallengeRegistry(_make_settings([]))
        with pytest.raises(TypeError, match="missing the 'challenge_type'"):
            registry.register(_MissingChallengeType)

    def test_register_generic_rejected(self):
        with pytest.raises(TypeError):
            ChallengeRegistry().register(Challenge)

    def test_register_replaces_builtin(self):
        registry = ChallengeRegistry()
        registry.register(_OverrideHttp01)
        assert registry.get_class("http-01") is _OverrideHttp01


# ---------------------------------------------------------------------------
# create()
# ---------------------------------------------------------------------------


class TestCreate:
    def test_creates_matching_variant(self, http01_data):
        challenge = ChallengeRegistry().create(http01_data)
        assert type(challenge) is Http01Challenge
        assert challenge.token == "abc123"

    def test_unknown_type_creates_generic(self):
        data = {"type": "proprietary-xyz", "status": "processing", "vendor": [1, 2]}
        challenge = ChallengeRegistry().create(data)
        assert type(challenge) is Challenge
        assert challenge.status is ChallengeStatus.PROCESSING
        assert challenge.marshal() == data

    def test_disabled_type_creates_generic(self, http01_data):
        challenge = ChallengeRegistry(_make_settings(["dns-01"])).create(http01_data)
        assert type(challenge) is Challenge

    def test_missing_type(self):
        with pytest.raises(AcmeFormatError):
            ChallengeRegistry().create({"status": "pending", "token": "abc"})

    def test_non_string_type(self):
        with pytest.raises(AcmeFormatError):
            ChallengeRegistry().create({"type": ["http-01"]})
