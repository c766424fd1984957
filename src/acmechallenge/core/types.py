"""Enumerated types for ACME challenge resources.

All enums inherit from ``StrEnum`` so their ``.value`` is a plain
string that JSON round-trips naturally.
"""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Challenge status
# ---------------------------------------------------------------------------


class ChallengeStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    VALID = "valid"
    INVALID = "invalid"

    @classmethod
    def parse(
        cls,
        value: object,
        default: ChallengeStatus | None = None,
    ) -> ChallengeStatus:
        """Parse a status string sent by the server.

        Matching is case-insensitive.  Anything that is not a known
        status, including ``None`` and non-string values, yields
        *default* (``PENDING`` when omitted).  Never raises.
        """
        if default is None:
            default = cls.PENDING
        if not isinstance(value, str):
            return default
        try:
            return cls(value.lower())
        except ValueError:
            return default


# ---------------------------------------------------------------------------
# Challenge types
# ---------------------------------------------------------------------------


class ChallengeType(StrEnum):
    HTTP_01 = "http-01"
    DNS_01 = "dns-01"
    TLS_ALPN_01 = "tls-alpn-01"
