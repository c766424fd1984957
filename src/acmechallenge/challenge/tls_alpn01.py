"""TLS-ALPN-01 challenge (RFC 8737).

The client answers a TLS handshake negotiating ALPN ``acme-tls/1`` with
a self-signed certificate that carries the critical ``acmeIdentifier``
extension.  The extension value is the SHA-256 digest of the key
authorization, wrapped in a DER OCTET STRING.
"""

from __future__ import annotations

from cryptography.x509.oid import ObjectIdentifier

from acmechallenge.challenge.token import TokenChallenge
from acmechallenge.core.types import ChallengeType

# OID for the acmeIdentifier extension (RFC 8737 §3)
ACME_IDENTIFIER_OID = ObjectIdentifier("1.3.6.1.5.5.7.1.31")

# ALPN protocol identifier
ACME_TLS_ALPN = "acme-tls/1"

_DER_OCTET_STRING = 0x04


class TlsAlpn01Challenge(TokenChallenge):
    """TLS-ALPN-01 challenge: present an ``acmeIdentifier`` certificate."""

    challenge_type = ChallengeType.TLS_ALPN_01

    @property
    def acme_validation(self) -> bytes:
        """Raw 32-byte SHA-256 digest of the key authorization."""
        return self._authorization_digest()

    @property
    def extension_value(self) -> bytes:
        """DER-encoded ``acmeIdentifier`` extension value."""
        digest = self.acme_validation
        return bytes((_DER_OCTET_STRING, len(digest))) + digest
