# services/user_service.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.errors import Conflict
from core.security import hash_password
from models.models import (
    Membership,
    MembershipStatus,
    NextMembership,
    Project,
    ProjectMember,
    Token,
    User,
)
from services.project_service import purge_project

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def create_user(session: Session, email: str, password: str, name: Optional[str] = None) -> User:
    """Insert an inactive user together with a non-expiring FREE membership."""
    email = normalize_email(email)
    if get_user_by_email(session, email):
        raise Conflict("User already exists")

    user = User(email=email, name=name, password_hash=hash_password(password))
    session.add(user)
    session.flush()
    session.add(Membership(user_id=user.id, status=MembershipStatus.FREE.value, ends_at=None))

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("User already exists")
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(user)

    logger.info("Created user %s", user.id)
    return user


def delete_user(session: Session, user: User) -> None:
    """Remove the account, its owned projects, memberships and tokens in one commit."""
    user_id = user.id
    try:
        for project in session.exec(select(Project).where(Project.owner_id == user_id)).all():
            purge_project(session, project)

        for member in session.exec(select(ProjectMember).where(ProjectMember.user_id == user_id)).all():
            member.tickets.clear()
            session.delete(member)

        for model in (Token, NextMembership, Membership):
            for row in session.exec(select(model).where(model.user_id == user_id)).all():
                session.delete(row)

        session.flush()
        session.expire(user)
        session.delete(user)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info("Deleted user %s", user_id)
