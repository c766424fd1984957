"""DNS-01 challenge (RFC 8555 §8.4).

The client publishes a TXT record at ``_acme-challenge.{domain}``
containing the base64url-encoded SHA-256 digest of the key
authorization.
"""

from __future__ import annotations

from acmechallenge.challenge.token import TokenChallenge
from acmechallenge.core.jwk import b64url_encode
from acmechallenge.core.types import ChallengeType

RECORD_PREFIX = "_acme-challenge"


class Dns01Challenge(TokenChallenge):
    """DNS-01 challenge: publish a TXT record derived from the key authorization."""

    challenge_type = ChallengeType.DNS_01

    @property
    def digest(self) -> str:
        """The TXT record value."""
        return b64url_encode(self._authorization_digest())

    @staticmethod
    def record_name(domain: str) -> str:
        """TXT record name for *domain*; a wildcard prefix is stripped."""
        domain = domain.removeprefix("*.").rstrip(".")
        return f"{RECORD_PREFIX}.{domain}"
