from datetime import timedelta

import pytest

from core.errors import InvalidToken, UserNotFound
from core.security import (
    create_access_token,
    create_refresh_token,
    create_tokens_for_user,
    decode_token,
    hash_password,
    refresh_access_token,
    verify_password,
)
from services.user_service import delete_user


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)


def test_access_and_refresh_claims(make_user):
    user = make_user("claims@example.com")
    access, refresh = create_tokens_for_user(user)

    access_claims = decode_token(access)
    refresh_claims = decode_token(refresh)
    assert access_claims["email"] == user.email
    assert access_claims["id"] == user.id
    assert access_claims["tokenType"] == "access"
    assert refresh_claims["tokenType"] == "refresh"
    # 1 hour vs 30 days
    assert refresh_claims["exp"] - access_claims["exp"] > timedelta(days=29).total_seconds()


def test_decode_rejects_tampered_and_expired_tokens(make_user):
    user = make_user("expired@example.com")

    with pytest.raises(InvalidToken):
        decode_token(create_access_token(user) + "x")

    with pytest.raises(InvalidToken):
        decode_token(create_access_token(user, expires_delta=timedelta(seconds=-5)))


def test_refresh_issues_new_access_token(session, make_user):
    user = make_user("refresh@example.com")
    new_access = refresh_access_token(session, create_refresh_token(user))
    claims = decode_token(new_access)
    assert claims["tokenType"] == "access"
    assert claims["id"] == user.id


def test_refresh_rejects_access_token(session, make_user):
    user = make_user("wrongtype@example.com")
    with pytest.raises(InvalidToken):
        refresh_access_token(session, create_access_token(user))


def test_refresh_fails_when_user_is_gone(session, make_user):
    user = make_user("gone@example.com")
    refresh = create_refresh_token(user)
    delete_user(session, user)

    with pytest.raises(UserNotFound):
        refresh_access_token(session, refresh)
