from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.config import Settings, parse_duration
from app.core.errors import AppError, ErrorKind
from app.core.security import PasswordHasher, TokenService


def test_parse_duration_units():
    assert parse_duration("24h") == timedelta(hours=24)
    assert parse_duration("7d") == timedelta(days=7)
    assert parse_duration("15m") == timedelta(minutes=15)
    assert parse_duration("90") == timedelta(seconds=90)


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("soon")


def test_token_pair_carries_claims(tokens, settings):
    pair = tokens.issue_token_pair("user_1", "a@x.com", "admin")

    access = jwt.decode(pair.access_token, settings.JWT_SECRET, algorithms=["HS256"])
    refresh = tokens.verify_refresh_token(pair.refresh_token)

    assert access["type"] == "access"
    assert refresh["type"] == "refresh"
    for claims in (access, refresh):
        assert claims["userId"] == "user_1"
        assert claims["email"] == "a@x.com"
        assert claims["role"] == "admin"


def test_default_lifetimes(tokens):
    assert tokens.access_lifetime == timedelta(hours=24)
    assert tokens.refresh_lifetime == timedelta(days=7)


def test_two_pairs_are_distinct(tokens):
    first = tokens.issue_token_pair("user_1", "a@x.com", "user")
    second = tokens.issue_token_pair("user_1", "a@x.com", "user")
    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token


def test_access_token_is_not_a_refresh_token(tokens):
    pair = tokens.issue_token_pair("user_1", "a@x.com", "user")
    # Signed with the access secret, so the signature check fails first
    with pytest.raises(AppError) as exc:
        tokens.verify_refresh_token(pair.access_token)
    assert exc.value.kind == ErrorKind.INVALID_TOKEN


def test_wrong_token_type_with_shared_secret():
    shared = TokenService(Settings(JWT_SECRET="same", JWT_REFRESH_SECRET="same"))
    pair = shared.issue_token_pair("user_1", "a@x.com", "user")

    with pytest.raises(AppError) as exc:
        shared.verify_refresh_token(pair.access_token)
    assert exc.value.kind == ErrorKind.WRONG_TOKEN_TYPE

    with pytest.raises(AppError) as exc:
        shared.verify_access_token(pair.refresh_token)
    assert exc.value.kind == ErrorKind.WRONG_TOKEN_TYPE


def test_expired_refresh_token(tokens, settings):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    token = jwt.encode(
        {"userId": "user_1", "email": "a@x.com", "role": "user", "type": "refresh", "exp": past},
        settings.JWT_REFRESH_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(AppError) as exc:
        tokens.verify_refresh_token(token)
    assert exc.value.kind == ErrorKind.EXPIRED_TOKEN
    assert exc.value.status_code == 401


def test_malformed_token(tokens):
    with pytest.raises(AppError) as exc:
        tokens.verify_refresh_token("not-a-jwt")
    assert exc.value.kind == ErrorKind.INVALID_TOKEN


def test_password_hash_roundtrip(hasher):
    hashed = hasher.hash("secret1")
    assert hashed != "secret1"
    assert hasher.verify("secret1", hashed)
    assert not hasher.verify("secret2", hashed)


def test_password_hash_is_salted(hasher):
    assert hasher.hash("secret1") != hasher.hash("secret1")


def test_long_password_is_truncated_not_rejected(hasher):
    long_password = "x" * 100
    hashed = hasher.hash(long_password)
    assert hasher.verify(long_password, hashed)


def test_verify_against_garbage_hash():
    assert not PasswordHasher(rounds=4).verify("secret1", "plaintext")
    assert not PasswordHasher(rounds=4).verify("secret1", "")
