"""Generic ACME challenge.

:class:`Challenge` holds the state of one challenge resource as sent by
the CA.  It is used directly for challenge types the client does not
know, and as the base class for the concrete types.

Subclasses set :attr:`Challenge.challenge_type`, which makes
:meth:`Challenge.acceptable` reject data of any other type, and override
:meth:`Challenge.respond` to add their proof material.
"""

from __future__ import annotations

import copy
import json
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Self
from urllib.parse import urlsplit

from acmechallenge.core.timestamps import parse_timestamp
from acmechallenge.core.types import ChallengeStatus
from acmechallenge.errors import AcmeFormatError, AcmeProtocolError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from acmechallenge.core.claims import ClaimBuilder

log = logging.getLogger(__name__)

KEY_TYPE = "type"
KEY_STATUS = "status"
KEY_URI = "uri"
KEY_VALIDATED = "validated"


class Challenge:
    """A challenge resource of any type.

    All accessors are views over :attr:`fields`; the only way to change
    the state is :meth:`unmarshal`, which swaps in a new mapping.
    Instances are not safe for concurrent mutation.
    """

    challenge_type: ClassVar[str | None] = None
    """The type string this class handles, or ``None`` to accept any."""

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> Self:
        """Create an instance and load *data* into it."""
        challenge = cls()
        challenge.unmarshal(data)
        return challenge

    @classmethod
    def from_json(cls, text: str | bytes) -> Self:
        """Restore an instance from :meth:`to_json` output."""
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = "Cannot deserialize challenge"
            raise AcmeProtocolError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Cannot deserialize challenge: expected a JSON object, got {type(data).__name__}"
            raise AcmeProtocolError(msg)
        return cls.from_data(data)

    # -- Accessors ---------------------------------------------------------

    @property
    def fields(self) -> Mapping[str, Any]:
        """Read-only view of the challenge state."""
        return MappingProxyType(self._fields)

    @property
    def type(self) -> str | None:
        """The challenge type string, e.g. ``"http-01"``.

        Returns ``None`` only for an instance that was never loaded;
        :meth:`unmarshal` refuses data without a type.
        """
        return self._get(KEY_TYPE)

    @property
    def status(self) -> ChallengeStatus:
        """The challenge status; ``PENDING`` if missing or unknown."""
        return ChallengeStatus.parse(self._get(KEY_STATUS), ChallengeStatus.PENDING)

    @property
    def location(self) -> str | None:
        """The challenge URL, or ``None`` if the server did not send one.

        The validated string is returned as received, not a parsed URL
        object, so it compares equal to the server's value and can be
        sent back unchanged.  Use :func:`urllib.parse.urlsplit` on it when
        the components are needed.

        Raises
        ------
        AcmeProtocolError
            If the value is not an absolute URI.

        """
        uri = self._get(KEY_URI)
        if uri is None:
            return None
        if not isinstance(uri, str) or any(ch.isspace() for ch in uri):
            msg = f"Invalid URI: {uri!r}"
            raise AcmeProtocolError(msg)
        try:
            parts = urlsplit(uri)
        except ValueError as exc:
            msg = f"Invalid URI: {uri!r}"
            raise AcmeProtocolError(msg) from exc
        if not parts.scheme or not (parts.netloc or parts.path):
            msg = f"Invalid URI: {uri!r}"
            raise AcmeProtocolError(msg)
        return uri

    @property
    def validated(self) -> datetime | None:
        """When the challenge was validated, or ``None`` if it was not."""
        value = self._get(KEY_VALIDATED)
        if value is None:
            return None
        return parse_timestamp(value)

    def _get(self, key: str) -> Any:  # noqa: ANN401
        return self._fields.get(key)

    # -- Load / store ------------------------------------------------------

    def acceptable(self, challenge_type: str) -> bool:
        """Check whether *challenge_type* may be loaded into this instance."""
        if self.challenge_type is None:
            return True
        return challenge_type == self.challenge_type

    def unmarshal(self, data: Mapping[str, Any]) -> None:
        """Replace the challenge state with a copy of *data*.

        Raises
        ------
        AcmeFormatError
            If *data* has no ``type``.
        AcmeProtocolError
            If this class does not accept the type.

        """
        challenge_type = data.get(KEY_TYPE)
        if challenge_type is None:
            msg = "Challenge data does not contain a type"
            raise AcmeFormatError(msg)
        if not isinstance(challenge_type, str):
            msg = f"Challenge type must be a string, got {type(challenge_type).__name__}"
            raise AcmeFormatError(msg)
        if not self.acceptable(challenge_type):
            msg = f"wrong type: {challenge_type}"
            raise AcmeProtocolError(msg)

        fields = copy.deepcopy(dict(data))
        self._fields = fields
        log.debug("Loaded %s challenge into %s", challenge_type, type(self).__name__)

    def marshal(self) -> dict[str, Any]:
        """Return a copy of the challenge state for persisting."""
        return copy.deepcopy(self._fields)

    def to_json(self) -> str:
        """Serialise the challenge state to compact JSON.

        Returns
        -------
        str
            The fields with sorted keys and no whitespace, accepted by
            :meth:`from_json`.

        """
        return json.dumps(self._fields, sort_keys=True, separators=(",", ":"))

    # -- Response ----------------------------------------------------------

    def respond(self, claims: ClaimBuilder) -> None:
        """Write the challenge response into *claims*."""
        claims.put(KEY_TYPE, self.type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Challenge):
            return NotImplemented
        return type(self) is type(other) and self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type!r} status={self.status.value!r}>"
