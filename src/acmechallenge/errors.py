"""ACME error taxonomy and RFC 8555 error types.

Provides the exception hierarchy raised by the challenge core plus all
standard ACME error-type URNs.  Every exception exposes a ``kind``
string so callers can branch on the category without walking the
class hierarchy.

Usage::

    from acmechallenge.errors import problem_to_error

    raise problem_to_error(problem_json, retry_after=60)
"""

from __future__ import annotations

from typing import Any, ClassVar

# ---------------------------------------------------------------------------
# RFC 8555 §6.7: ACME error-type URNs
# ---------------------------------------------------------------------------
_P = "urn:ietf:params:acme:error:"

ACCOUNT_DOES_NOT_EXIST = _P + "accountDoesNotExist"
ALREADY_REVOKED = _P + "alreadyRevoked"
BAD_CSR = _P + "badCSR"
BAD_NONCE = _P + "badNonce"
BAD_PUBLIC_KEY = _P + "badPublicKey"
BAD_REVOCATION_REASON = _P + "badRevocationReason"
BAD_SIGNATURE_ALGORITHM = _P + "badSignatureAlgorithm"
CAA = _P + "caa"
COMPOUND = _P + "compound"
CONNECTION = _P + "connection"
DNS = _P + "dns"
EXTERNAL_ACCOUNT_REQUIRED = _P + "externalAccountRequired"
INCORRECT_RESPONSE = _P + "incorrectResponse"
INVALID_CONTACT = _P + "invalidContact"
MALFORMED = _P + "malformed"
ORDER_NOT_READY = _P + "orderNotReady"
RATE_LIMITED = _P + "rateLimited"
REJECTED_IDENTIFIER = _P + "rejectedIdentifier"
SERVER_INTERNAL = _P + "serverInternal"
TLS = _P + "tls"
UNAUTHORIZED = _P + "unauthorized"
UNSUPPORTED_CONTACT = _P + "unsupportedContact"
UNSUPPORTED_IDENTIFIER = _P + "unsupportedIdentifier"
USER_ACTION_REQUIRED = _P + "userActionRequired"

ABOUT_BLANK = "about:blank"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AcmeError(Exception):
    """Base class for all errors raised by this package.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    kind: ClassVar[str] = "acme"
    retryable: ClassVar[bool] = False

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class AcmeFormatError(AcmeError, ValueError):
    """A required member is missing from a resource representation."""

    kind = "format"


class AcmeProtocolError(AcmeError):
    """The data received does not follow the ACME protocol.

    Raised for type mismatches, malformed URIs or timestamps, and keys
    that cannot be represented as a JWK.  Not retryable.
    """

    kind = "protocol"


class AcmeServerError(AcmeError):
    """An error reported by the CA in an RFC 7807 problem document.

    Parameters
    ----------
    error_type:
        The problem ``type`` URN, e.g. :data:`MALFORMED`.
    detail:
        The problem ``detail`` text, verbatim.

    """

    kind = "server"

    def __init__(self, error_type: str, detail: str) -> None:
        self.error_type = error_type
        super().__init__(detail)
        self.args = (error_type, detail)

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the RFC 7807 JSON structure."""
        return {"type": self.error_type, "detail": self.detail}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_type!r}, {self.detail!r})"

    def __str__(self) -> str:
        return self.detail


class AcmeRateLimitExceededError(AcmeServerError):
    """The CA rejected a request because a rate limit was exceeded.

    Carries the same fields as :class:`AcmeServerError`; callers should
    back off longer than for other server errors.

    Parameters
    ----------
    retry_after:
        Seconds to wait, taken from the ``Retry-After`` header when the
        transport layer has one.

    """

    kind = "rateLimited"
    retryable = True

    def __init__(
        self,
        error_type: str,
        detail: str,
        *,
        retry_after: int | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(error_type, detail)

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            _rebuild_rate_limit_error,
            (type(self), self.error_type, self.detail, self.retry_after),
        )


def _rebuild_rate_limit_error(
    cls: type[AcmeRateLimitExceededError],
    error_type: str,
    detail: str,
    retry_after: int | None,
) -> AcmeRateLimitExceededError:
    return cls(error_type, detail, retry_after=retry_after)


# ---------------------------------------------------------------------------
# Problem document mapping
# ---------------------------------------------------------------------------


def problem_to_error(
    problem: dict[str, Any],
    *,
    retry_after: int | None = None,
) -> AcmeServerError:
    """Build the matching exception for a CA problem document.

    ``rateLimited`` problems become :class:`AcmeRateLimitExceededError`,
    everything else :class:`AcmeServerError`.  A problem without a
    ``type`` is treated as ``about:blank`` (RFC 7807 §4.2).
    """
    error_type = problem.get("type") or ABOUT_BLANK
    detail = problem.get("detail") or problem.get("title") or ""

    if error_type == RATE_LIMITED:
        return AcmeRateLimitExceededError(
            error_type,
            detail,
            retry_after=retry_after,
        )
    return AcmeServerError(error_type, detail)
