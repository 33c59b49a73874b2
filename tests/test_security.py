"""Tests for token issuance / verification and password hashing."""

from datetime import timedelta

import pytest
from jose import jwt

from minepanel.core.roles import Role
from minepanel.core.security import TokenIssuer, get_password_hash, verify_password
from minepanel.schemas.token import Identity

ACCESS_SECRET = "unit-access-secret"
REFRESH_SECRET = "unit-refresh-secret"


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)


@pytest.fixture
def identity() -> Identity:
    return Identity(id=7, username="Steve", role=Role.MOD)


def test_access_token_round_trip(issuer: TokenIssuer, identity: Identity):
    pair = issuer.issue(identity)
    assert issuer.verify_access(pair.access_token) == identity


def test_refresh_token_round_trip(issuer: TokenIssuer, identity: Identity):
    pair = issuer.issue(identity)
    assert issuer.verify_refresh(pair.refresh_token) == identity


def test_default_lifetimes():
    issuer = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)
    assert issuer.access_ttl == timedelta(minutes=15)
    assert issuer.refresh_ttl == timedelta(days=7)


def test_expired_access_token_rejected(identity: Identity):
    expired = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, access_ttl=timedelta(seconds=-1))
    token = expired.create_access_token(identity)
    assert expired.verify_access(token) is None


def test_expired_refresh_token_rejected(identity: Identity):
    expired = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET, refresh_ttl=timedelta(seconds=-1))
    token = expired.create_refresh_token(identity)
    assert expired.verify_refresh(token) is None


def test_refresh_token_not_accepted_as_access(issuer: TokenIssuer, identity: Identity):
    pair = issuer.issue(identity)
    assert issuer.verify_access(pair.refresh_token) is None
    assert issuer.verify_refresh(pair.access_token) is None


def test_token_kinds_isolated_even_with_swapped_secrets(identity: Identity):
    """A refresh token signed with the access secret still fails as an access token."""
    issuer = TokenIssuer(ACCESS_SECRET, REFRESH_SECRET)
    swapped = TokenIssuer(REFRESH_SECRET, ACCESS_SECRET)
    forged_refresh = swapped.create_refresh_token(identity)  # signed with ACCESS_SECRET
    assert issuer.verify_access(forged_refresh) is None


def test_token_signed_with_other_secret_rejected(issuer: TokenIssuer, identity: Identity):
    other = TokenIssuer("someone-else", "someone-else-refresh")
    assert issuer.verify_access(other.create_access_token(identity)) is None


def test_garbage_tokens_rejected(issuer: TokenIssuer):
    for token in ["", "garbage", "a.b.c", "Bearer xyz"]:
        assert issuer.verify_access(token) is None
        assert issuer.verify_refresh(token) is None


def test_malformed_payload_rejected(issuer: TokenIssuer):
    """Correctly signed token missing identity claims fails without raising."""
    token = jwt.encode({"sub": "1", "type": "access"}, ACCESS_SECRET, algorithm="HS256")
    assert issuer.verify_access(token) is None

    bad_role = jwt.encode(
        {"sub": "1", "username": "x", "role": "OWNER", "type": "access"},
        ACCESS_SECRET,
        algorithm="HS256",
    )
    assert issuer.verify_access(bad_role) is None


def test_identical_secrets_refused():
    with pytest.raises(ValueError):
        TokenIssuer("same", "same")


def test_password_hash_and_verify():
    hashed = get_password_hash("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)
