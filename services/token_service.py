# services/token_service.py
"""
Single-use, short-lived tokens for account activation, deactivation,
password reset, account deletion and MFA email verification.

A user holds at most one live token: issuing a new one deletes the old.
Consuming only validates; callers delete the token right after acting on it
so the same value can never be replayed.
"""
import logging
import secrets
from datetime import datetime, timedelta

from sqlmodel import Session, select

from core.config import settings
from core.errors import TokenExpired, TokenNotFound
from models.models import Token, User

logger = logging.getLogger(__name__)

EPHEMERAL_TOKEN_TTL = timedelta(minutes=settings.EPHEMERAL_TOKEN_EXPIRE_MINUTES)


def create_ephemeral_token(session: Session, user: User) -> str:
    """Replace any existing token for ``user`` and return the new value."""
    for existing in session.exec(select(Token).where(Token.user_id == user.id)).all():
        session.delete(existing)
    # The delete must reach the store before the insert hits the unique user_id index
    session.flush()

    now = datetime.utcnow()
    token = Token(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        created_at=now,
        expires_at=now + EPHEMERAL_TOKEN_TTL,
    )
    session.add(token)
    session.commit()
    session.refresh(token)

    logger.info("Issued ephemeral token for user %s (expires %s)", user.id, token.expires_at.isoformat())
    return token.token


def consume_ephemeral_token(session: Session, token: str) -> User:
    """Return the token's owner, or raise TokenNotFound / TokenExpired."""
    record = session.exec(select(Token).where(Token.token == token)).first()
    if not record:
        raise TokenNotFound()
    if record.is_expired():
        raise TokenExpired()
    return record.user


def delete_ephemeral_token(session: Session, token: str) -> None:
    """Remove a token. Does not commit; callers commit alongside their effect."""
    record = session.exec(select(Token).where(Token.token == token)).first()
    if record:
        session.delete(record)
