from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from core.errors import TokenExpired, TokenNotFound
from models.models import Token, User
from services.token_service import (
    consume_ephemeral_token,
    create_ephemeral_token,
    delete_ephemeral_token,
)


def test_new_token_replaces_previous_one(session, make_user):
    user = make_user("twice@example.com")
    first = create_ephemeral_token(session, user)
    second = create_ephemeral_token(session, user)

    assert first != second
    with pytest.raises(TokenNotFound):
        consume_ephemeral_token(session, first)
    assert consume_ephemeral_token(session, second).id == user.id
    assert len(session.exec(select(Token).where(Token.user_id == user.id)).all()) == 1


def test_token_expires_after_five_minutes(session, make_user):
    user = make_user("ttl@example.com")
    value = create_ephemeral_token(session, user)
    record = session.exec(select(Token).where(Token.token == value)).one()

    assert record.expires_at - record.created_at == timedelta(minutes=5)

    record.expires_at = datetime.utcnow() - timedelta(seconds=1)
    session.add(record)
    session.commit()

    with pytest.raises(TokenExpired):
        consume_ephemeral_token(session, value)


def test_timestamps_are_stored_as_naive_utc(session, make_user):
    user = make_user("clock@example.com")
    value = create_ephemeral_token(session, user)
    session.expire_all()
    record = session.exec(select(Token).where(Token.token == value)).one()

    assert record.created_at.tzinfo is None and record.expires_at.tzinfo is None
    assert abs(record.created_at - datetime.utcnow()) < timedelta(minutes=1)
    assert session.get(User, user.id).created_at.tzinfo is None


def test_deleted_token_cannot_be_replayed(session, make_user):
    user = make_user("replay@example.com")
    value = create_ephemeral_token(session, user)

    assert consume_ephemeral_token(session, value).id == user.id
    delete_ephemeral_token(session, value)
    session.commit()

    with pytest.raises(TokenNotFound):
        consume_ephemeral_token(session, value)


def test_unknown_token_is_not_found(session):
    with pytest.raises(TokenNotFound):
        consume_ephemeral_token(session, "does-not-exist")
