"""Unit tests for acmechallenge.errors: error taxonomy."""

from __future__ import annotations

import pickle

import pytest

from acmechallenge.errors import (
    ABOUT_BLANK,
    ACCOUNT_DOES_NOT_EXIST,
    BAD_NONCE,
    MALFORMED,
    RATE_LIMITED,
    SERVER_INTERNAL,
    AcmeError,
    AcmeFormatError,
    AcmeProtocolError,
    AcmeRateLimitExceededError,
    AcmeServerError,
    problem_to_error,
)

# ---------------------------------------------------------------------------
# TestUrns
# ---------------------------------------------------------------------------


class TestUrns:
    @pytest.mark.parametrize(
        "urn,suffix",
        [
            (ACCOUNT_DOES_NOT_EXIST, "accountDoesNotExist"),
            (BAD_NONCE, "badNonce"),
            (MALFORMED, "malformed"),
            (RATE_LIMITED, "rateLimited"),
            (SERVER_INTERNAL, "serverInternal"),
        ],
    )
    def test_prefix(self, urn, suffix):
        assert urn == f"urn:ietf:params:acme:error:{suffix}"


# ---------------------------------------------------------------------------
# TestHierarchy
# ---------------------------------------------------------------------------


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc,kind",
        [
            (AcmeFormatError("missing"), "format"),
            (AcmeProtocolError("bad"), "protocol"),
            (AcmeServerError(MALFORMED, "bad"), "server"),
            (AcmeRateLimitExceededError(RATE_LIMITED, "slow down"), "rateLimited"),
        ],
    )
    def test_kind(self, exc, kind):
        assert exc.kind == kind
        assert isinstance(exc, AcmeError)

    def test_format_error_is_value_error(self):
        assert isinstance(AcmeFormatError("x"), ValueError)

    def test_rate_limit_specialises_server_error(self):
        assert issubclass(AcmeRateLimitExceededError, AcmeServerError)

    def test_only_rate_limit_is_retryable(self):
        assert AcmeRateLimitExceededError(RATE_LIMITED, "x").retryable is True
        assert AcmeServerError(MALFORMED, "x").retryable is False
        assert AcmeProtocolError("x").retryable is False
        assert AcmeFormatError("x").retryable is False

    def test_detail_is_message(self):
        exc = AcmeProtocolError("wrong type: dns-01")
        assert exc.detail == "wrong type: dns-01"
        assert str(exc) == "wrong type: dns-01"


# ---------------------------------------------------------------------------
# TestServerError
# ---------------------------------------------------------------------------


class TestServerError:
    def test_fields(self):
        exc = AcmeServerError(BAD_NONCE, "JWS has an invalid anti-replay nonce")
        assert exc.error_type == BAD_NONCE
        assert exc.detail == "JWS has an invalid anti-replay nonce"

    def test_to_dict(self):
        exc = AcmeServerError(MALFORMED, "bad request")
        assert exc.to_dict() == {"type": MALFORMED, "detail": "bad request"}

    def test_repr(self):
        exc = AcmeServerError(MALFORMED, "bad")
        assert repr(exc) == f"AcmeServerError({MALFORMED!r}, 'bad')"

    def test_rate_limit_retry_after(self):
        exc = AcmeRateLimitExceededError(RATE_LIMITED, "too many", retry_after=120)
        assert exc.retry_after == 120
        assert exc.error_type == RATE_LIMITED

    def test_rate_limit_retry_after_default(self):
        assert AcmeRateLimitExceededError(RATE_LIMITED, "x").retry_after is None

    def test_catchable_as_server_error(self):
        with pytest.raises(AcmeServerError):
            raise AcmeRateLimitExceededError(RATE_LIMITED, "x")

    def test_str_is_detail(self):
        assert str(AcmeServerError(MALFORMED, "bad request")) == "bad request"

    def test_server_error_survives_pickle(self):
        exc = pickle.loads(pickle.dumps(AcmeServerError(BAD_NONCE, "stale nonce")))
        assert type(exc) is AcmeServerError
        assert exc.error_type == BAD_NONCE
        assert exc.detail == "stale nonce"

    @pytest.mark.parametrize("retry_after", [5, None])
    def test_rate_limit_error_survives_pickle(self, retry_after):
        original = AcmeRateLimitExceededError(RATE_LIMITED, "slow down", retry_after=retry_after)
        exc = pickle.loads(pickle.dumps(original))
        assert type(exc) is AcmeRateLimitExceededError
        assert exc.error_type == RATE_LIMITED
        assert exc.detail == "slow down"
        assert exc.retry_after == retry_after
        assert exc.retryable is True


# ---------------------------------------------------------------------------
# TestProblemToError
# ---------------------------------------------------------------------------


class TestProblemToError:
    def test_rate_limited(self):
        exc = problem_to_error(
            {"type": RATE_LIMITED, "detail": "Error creating new order"},
            retry_after=3600,
        )
        assert type(exc) is AcmeRateLimitExceededError
        assert exc.detail == "Error creating new order"
        assert exc.retry_after == 3600

    def test_other_problem(self):
        exc = problem_to_error({"type": MALFORMED, "detail": "bad"})
        assert type(exc) is AcmeServerError
        assert exc.error_type == MALFORMED

    def test_missing_type_is_about_blank(self):
        exc = problem_to_error({"detail": "oops"})
        assert exc.error_type == ABOUT_BLANK
        assert exc.kind == "server"

    def test_title_used_when_detail_missing(self):
        exc = problem_to_error({"type": SERVER_INTERNAL, "title": "Internal Error"})
        assert exc.detail == "Internal Error"

    def test_empty_problem(self):
        exc = problem_to_error({})
        assert exc.error_type == ABOUT_BLANK
        assert exc.detail == ""
