"""JWK conversion, RFC 7638 thumbprints and key authorizations.

Uses the ``cryptography`` library directly -- no josepy dependency.
Every function is pure and safe to call from several threads.

Security note:
    The thumbprint is what binds a challenge response to the account
    key.  Its canonical JSON form (required members only, sorted
    names, no whitespace) must not change, or the CA will reject every
    key authorization computed here.
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from acmechallenge.errors import AcmeProtocolError

# --- Constants -----------------------------------------------------------

_THUMBPRINT_HASH = "sha256"
"""Hash used for JWK thumbprints (RFC 8555 §8.1)."""

# Members that take part in the thumbprint, per key type (RFC 7638 §3.2)
_REQUIRED_MEMBERS: dict[str, tuple[str, ...]] = {
    "RSA": ("e", "kty", "n"),
    "EC": ("crv", "kty", "x", "y"),
    "OKP": ("crv", "kty", "x"),
}

# Canonical JWK curve names to cryptography curve classes and sizes
_EC_CURVES: dict[str, tuple[type[ec.EllipticCurve], int]] = {
    "P-256": (ec.SECP256R1, 32),
    "P-384": (ec.SECP384R1, 48),
    "P-521": (ec.SECP521R1, 66),
}

_EC_CURVE_NAMES: dict[str, str] = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
}


# --- Base64url helpers (RFC 7515 §2) -------------------------------------


def b64url_decode(s: str) -> bytes:
    """Decode a base64url string.

    Parameters
    ----------
    s:
        Base64url text, with or without ``=`` padding.

    Returns
    -------
    bytes
        The decoded bytes.

    """
    s = s.replace("-", "+").replace("_", "/")
    remainder = len(s) % 4
    if remainder:
        s += "=" * (4 - remainder)
    return base64.b64decode(s)


def b64url_encode(b: bytes) -> str:
    """Encode bytes to base64url.

    Parameters
    ----------
    b:
        Raw bytes to encode.

    Returns
    -------
    str
        The base64url text with the ``=`` padding stripped.

    """
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def _int_to_b64(value: int, length: int | None = None) -> str:
    if length is None:
        length = max(1, (value.bit_length() + 7) // 8)
    return b64url_encode(value.to_bytes(length, "big"))


# --- Key -> JWK ----------------------------------------------------------


def _public_half(key: Any) -> Any:  # noqa: ANN401
    """Return the public key of a private key, or *key* unchanged."""
    public_key = getattr(key, "public_key", None)
    if callable(public_key):
        return public_key()
    return key


def public_key_to_jwk(key: Any) -> dict[str, str]:  # noqa: ANN401
    """Convert a ``cryptography`` key to its public-only JWK dictionary.

    Private keys are accepted; only their public half is exported.

    Raises
    ------
    AcmeProtocolError
        If the key type has no JWK representation.

    """
    key = _public_half(key)

    if isinstance(key, rsa.RSAPublicKey):
        nums = key.public_numbers()
        return {
            "kty": "RSA",
            "n": _int_to_b64(nums.n),
            "e": _int_to_b64(nums.e),
        }

    if isinstance(key, ec.EllipticCurvePublicKey):
        crv = _EC_CURVE_NAMES.get(key.curve.name)
        if crv is None:
            msg = f"Unsupported EC curve '{key.curve.name}'"
            raise AcmeProtocolError(msg)
        size = _EC_CURVES[crv][1]
        nums = key.public_numbers()
        return {
            "kty": "EC",
            "crv": crv,
            "x": _int_to_b64(nums.x, size),
            "y": _int_to_b64(nums.y, size),
        }

    if isinstance(key, ed25519.Ed25519PublicKey | ed448.Ed448PublicKey):
        crv = "Ed25519" if isinstance(key, ed25519.Ed25519PublicKey) else "Ed448"
        raw = key.public_bytes(Encoding.Raw, PublicFormat.Raw)
        return {"kty": "OKP", "crv": crv, "x": b64url_encode(raw)}

    msg = f"Unsupported key type '{type(key).__name__}'"
    raise AcmeProtocolError(msg)


# --- JWK -> key ----------------------------------------------------------


def jwk_to_public_key(
    jwk_dict: dict[str, Any],
) -> rsa.RSAPublicKey | ec.EllipticCurvePublicKey:
    """Convert an RSA or EC JWK dictionary to a ``cryptography`` public key.

    Raises
    ------
    AcmeProtocolError
        If the JWK is malformed or of an unsupported type.

    """
    kty = jwk_dict.get("kty")

    if kty == "RSA":
        try:
            n = int.from_bytes(b64url_decode(jwk_dict["n"]), "big")
            e = int.from_bytes(b64url_decode(jwk_dict["e"]), "big")
            return rsa.RSAPublicNumbers(e, n).public_key()
        except Exception as exc:  # noqa: BLE001
            msg = f"Invalid RSA JWK: {exc}"
            raise AcmeProtocolError(msg) from exc

    if kty == "EC":
        crv = jwk_dict.get("crv")
        if crv not in _EC_CURVES:
            msg = f"Unsupported EC curve '{crv}'; supported: {sorted(_EC_CURVES)}"
            raise AcmeProtocolError(msg)
        curve_cls = _EC_CURVES[crv][0]
        try:
            x = int.from_bytes(b64url_decode(jwk_dict["x"]), "big")
            y = int.from_bytes(b64url_decode(jwk_dict["y"]), "big")
            return ec.EllipticCurvePublicNumbers(x, y, curve_cls()).public_key()
        except Exception as exc:  # noqa: BLE001
            msg = f"Invalid EC JWK: {exc}"
            raise AcmeProtocolError(msg) from exc

    msg = f"Unsupported key type '{kty}'"
    raise AcmeProtocolError(msg)


# --- Thumbprint (RFC 7638) -----------------------------------------------


def _canonical_jwk(key: Any) -> dict[str, Any]:  # noqa: ANN401
    jwk_dict = dict(key) if isinstance(key, dict) else public_key_to_jwk(key)
    kty = jwk_dict.get("kty")
    members = _REQUIRED_MEMBERS.get(kty)  # type: ignore[arg-type]
    if members is None:
        msg = f"Cannot compute thumbprint for kty '{kty}'"
        raise AcmeProtocolError(msg)
    return {name: jwk_dict[name] for name in members}


def compute_thumbprint(key: Any) -> bytes:  # noqa: ANN401
    """Compute the RFC 7638 JWK Thumbprint of *key* using SHA-256.

    Only the required public members take part.  They are serialised
    as JSON with lexicographically sorted member names and no
    whitespace, UTF-8 encoded, and hashed.

    Parameters
    ----------
    key:
        A ``cryptography`` public or private key, or a JWK dictionary.

    Returns
    -------
    bytes
        The 32-byte SHA-256 digest.

    Raises
    ------
    ValueError
        If *key* is ``None``.
    AcmeProtocolError
        If the key has no JWK representation or cannot be hashed.

    """
    if key is None:
        msg = "key must not be None"
        raise ValueError(msg)

    try:
        canonical = _canonical_jwk(key)
        canonical_json = json.dumps(
            canonical,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.new(_THUMBPRINT_HASH, canonical_json.encode("utf-8")).digest()
    except (AcmeProtocolError, KeyError, TypeError, ValueError) as exc:
        msg = "Cannot compute key thumbprint"
        raise AcmeProtocolError(msg) from exc


def thumbprint_b64(key: Any) -> str:  # noqa: ANN401
    """Return the base64url-encoded RFC 7638 thumbprint of *key*."""
    return b64url_encode(compute_thumbprint(key))


def key_authorization(token: str, key: Any) -> str:  # noqa: ANN401
    """Compute the key authorization string: ``token.thumbprint``.

    Used by all ACME challenge types.
    """
    return f"{token}.{thumbprint_b64(key)}"
