"""Base class for challenges proven with a key authorization.

``http-01``, ``dns-01`` and ``tls-alpn-01`` all carry a ``token`` and
are answered with ``token.thumbprint`` (RFC 8555 §8.1).
"""

from __future__ import annotations

import hashlib
import re
from typing import TYPE_CHECKING, Any

from acmechallenge.challenge.base import Challenge
from acmechallenge.core.jwk import key_authorization
from acmechallenge.errors import AcmeProtocolError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from acmechallenge.core.claims import ClaimBuilder

KEY_TOKEN = "token"
KEY_KEY_AUTHORIZATION = "keyAuthorization"

# Tokens are base64url without padding (RFC 8555 §8.3, §8.4)
_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")


class TokenChallenge(Challenge):
    """A challenge with a token and a key authorization.

    The key authorization is client-side material: :meth:`authorize`
    keeps it on the instance, outside :attr:`fields`, so it never ends
    up in the persisted server state.
    """

    def __init__(self) -> None:
        super().__init__()
        self._authorization: str | None = None

    def unmarshal(self, data: Mapping[str, Any]) -> None:
        super().unmarshal(data)
        self._authorization = None

    @property
    def token(self) -> str:
        """The challenge token.

        Raises
        ------
        AcmeProtocolError
            If the server did not send a token, or the token is not
            base64url-encoded.

        """
        token = self._get(KEY_TOKEN)
        if not isinstance(token, str) or not token:
            msg = f"{self.type} challenge has no token"
            raise AcmeProtocolError(msg)
        if _TOKEN_RE.fullmatch(token) is None:
            msg = f"{self.type} challenge token is not base64url-encoded: {token!r}"
            raise AcmeProtocolError(msg)
        return token

    def authorize(self, key: Any) -> str:  # noqa: ANN401
        """Compute the key authorization for the account *key*.

        *key* is the account's public (or private) key, or its JWK.
        """
        self._authorization = key_authorization(self.token, key)
        return self._authorization

    @property
    def authorization(self) -> str:
        """The key authorization computed by :meth:`authorize`."""
        if self._authorization is None:
            msg = "Challenge has not been authorized yet"
            raise AcmeProtocolError(msg)
        return self._authorization

    @property
    def is_authorized(self) -> bool:
        """Whether :meth:`authorize` has run since the last load."""
        return self._authorization is not None

    def _authorization_digest(self) -> bytes:
        return hashlib.sha256(self.authorization.encode("ascii")).digest()

    def respond(self, claims: ClaimBuilder) -> None:
        super().respond(claims)
        if self._authorization is not None:
            claims.put(KEY_KEY_AUTHORIZATION, self._authorization)
