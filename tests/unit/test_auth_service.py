"""Unit tests for token issue, verification, expiry and revocation."""

from datetime import UTC, datetime, timedelta

import pytest

from teamsite.core.errors import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)
from teamsite.services.auth_service import TokenAuthority, TokenFailure, parse_bearer


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


@pytest.fixture()
def authority(clock: _Clock) -> TokenAuthority:
    return TokenAuthority("hunter2", "signing-key", clock=clock)


class TestAuthenticate:
    def test_wrong_password_rejected(self, authority: TokenAuthority):
        with pytest.raises(InvalidCredentialsError):
            authority.authenticate("hunter3")
        with pytest.raises(InvalidCredentialsError):
            authority.authenticate("")
        assert len(authority) == 0

    def test_issues_distinct_tokens_with_24h_lifetime(self, authority: TokenAuthority):
        first = authority.authenticate("hunter2")
        second = authority.authenticate("hunter2")
        assert first.token != second.token
        assert first.expires_in_ms == 24 * 60 * 60 * 1000
        assert len(authority) == 2

    def test_registry_does_not_hold_raw_tokens(self, authority: TokenAuthority):
        issued = authority.authenticate("hunter2")
        assert issued.token not in authority._tokens


class TestVerify:
    def test_valid_token(self, authority: TokenAuthority):
        issued = authority.authenticate("hunter2")
        check = authority.verify(issued.token)
        assert check.valid
        assert check.reason is None
        check.raise_for_failure()

    def test_missing_and_unknown(self, authority: TokenAuthority):
        assert authority.verify(None).reason == TokenFailure.MISSING
        assert authority.verify("").reason == TokenFailure.MISSING
        assert authority.verify("not-a-token").reason == TokenFailure.INVALID
        with pytest.raises(MissingTokenError):
            authority.verify(None).raise_for_failure()
        with pytest.raises(InvalidTokenError):
            authority.verify("nope").raise_for_failure()

    def test_expired_token_is_evicted(self, authority: TokenAuthority, clock: _Clock):
        issued = authority.authenticate("hunter2")
        clock.advance(hours=24, seconds=1)

        check = authority.verify(issued.token)
        assert check.reason == TokenFailure.EXPIRED
        with pytest.raises(ExpiredTokenError):
            check.raise_for_failure()
        assert len(authority) == 0
        assert authority.verify(issued.token).reason == TokenFailure.INVALID

    def test_token_valid_right_up_to_expiry(self, authority: TokenAuthority, clock: _Clock):
        issued = authority.authenticate("hunter2")
        clock.advance(hours=24)
        assert authority.verify(issued.token).valid


class TestRevokeAndPurge:
    def test_revoke_is_idempotent(self, authority: TokenAuthority):
        issued = authority.authenticate("hunter2")
        assert authority.revoke(issued.token) is True
        assert authority.revoke(issued.token) is False
        assert authority.verify(issued.token).reason == TokenFailure.INVALID

    def test_purge_expired(self, authority: TokenAuthority, clock: _Clock):
        authority.authenticate("hunter2")
        clock.advance(hours=12)
        fresh = authority.authenticate("hunter2")
        clock.advance(hours=13)

        assert authority.purge_expired() == 1
        assert authority.verify(fresh.token).valid


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("Basic abc", None),
        ("Bearer ", None),
        ("Bearer abc.def", "abc.def"),
    ],
)
def test_parse_bearer(header, expected):
    assert parse_bearer(header) == expected
