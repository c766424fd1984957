"""Claim builder for ACME request payloads.

Challenges write their response into a :class:`ClaimBuilder`; the
transport layer then signs ``to_json()`` (or ``to_dict()``) as the JWS
payload.  Serialisation always emits member names in lexicographic
order with no whitespace, which is the canonical form RFC 7638 relies
on.

Usage::

    claims = ClaimBuilder()
    claims.put("type", "http-01").put("keyAuthorization", authz)
    payload = claims.to_json()
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from typing import Any

from acmechallenge.core.jwk import b64url_encode, public_key_to_jwk
from acmechallenge.core.timestamps import format_timestamp


class ClaimBuilder:
    """Ordered key/value accumulator for JSON claims.

    Keys are kept in insertion order for inspection; :meth:`to_json`
    sorts them.  All ``put*`` methods return the builder so calls can be
    chained.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    # -- Writers -----------------------------------------------------------

    def put(self, key: str, value: Any) -> ClaimBuilder:  # noqa: ANN401
        """Set *key* to *value*, replacing any earlier value."""
        if not isinstance(key, str) or not key:
            msg = f"Claim key must be a non-empty string, got {key!r}"
            raise ValueError(msg)
        self._data[key] = value
        return self

    def put_all(self, values: Mapping[str, Any]) -> ClaimBuilder:
        """Copy every member of *values* into the builder."""
        for key, value in values.items():
            self.put(key, value)
        return self

    def put_base64(self, key: str, data: bytes) -> ClaimBuilder:
        """Set *key* to the base64url encoding of *data*."""
        return self.put(key, b64url_encode(data))

    def put_key(self, key: str, public_key: Any) -> ClaimBuilder:  # noqa: ANN401
        """Set *key* to the public JWK of *public_key*."""
        return self.put(key, public_key_to_jwk(public_key))

    def put_timestamp(self, key: str, value: datetime) -> ClaimBuilder:
        """Set *key* to *value* formatted as an ACME timestamp."""
        return self.put(key, format_timestamp(value))

    def array(self, key: str, values: Iterable[Any]) -> ClaimBuilder:
        """Set *key* to a JSON array of *values*."""
        return self.put(key, list(values))

    def object(self, key: str) -> ClaimBuilder:
        """Return a nested builder stored under *key*.

        Calling it again for the same key returns the same sub-builder.
        """
        existing = self._data.get(key)
        if isinstance(existing, ClaimBuilder):
            return existing
        sub = ClaimBuilder()
        self.put(key, sub)
        return sub

    # -- Readers -----------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the claims as plain (nested) dictionaries."""
        return {key: _plain(value) for key, value in self._data.items()}

    def to_json(self) -> str:
        """Serialise with sorted member names and no whitespace."""
        return json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def keys(self) -> list[str]:
        """Claim names in insertion order."""
        return list(self._data)

    def __getitem__(self, key: str) -> Any:  # noqa: ANN401
        return _plain(self._data[key])

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return self.to_json()

    def __repr__(self) -> str:
        return f"ClaimBuilder({self.to_json()})"


def _plain(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, ClaimBuilder):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
