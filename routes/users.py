# routes/users.py
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from core.database import get_session
from core.errors import Forbidden, InvalidInput, Unauthenticated, UserNotFound
from core.security import create_tokens_for_user, get_current_user, hash_password, verify_password
from models.models import User
from schemas.user_schema import (
    AuthResponse,
    EmailRequest,
    MembershipUpdate,
    MessageResponse,
    NextMembershipUpdate,
    PasswordUpdate,
    SettingsUpdate,
    UserCreate,
    UserLogin,
    UserRead,
)
from services.email_service import email_service
from services.membership_service import MembershipService
from services.token_service import (
    consume_ephemeral_token,
    create_ephemeral_token,
    delete_ephemeral_token,
)
from services.user_service import create_user, delete_user, get_user_by_email, normalize_email

import logging
logger = logging.getLogger(__name__)


router = APIRouter(tags=["Users"])


def _auth_response(user: User, email_sent=None) -> AuthResponse:
    access_token, refresh_token = create_tokens_for_user(user)
    return AuthResponse(
        user=UserRead.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
        email_sent=email_sent,
    )


def _send_token(session: Session, user: User, purpose: str) -> bool:
    token = create_ephemeral_token(session, user)
    return email_service.send_token_email(user.email, token, purpose)


def _save(session: Session, user: User) -> User:
    user.updated_at = datetime.utcnow()
    session.add(user)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(user)
    return user


# ----------------------------------------------------------------------
# ✅ Signup / Signin
# ----------------------------------------------------------------------
@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, session: Session = Depends(get_session)):
    """Create an inactive account and email its activation link."""
    user = create_user(session, user_data.email, user_data.password, user_data.name)
    email_sent = _send_token(session, user, "activation")
    return _auth_response(user, email_sent=email_sent)


@router.post("/signin", response_model=AuthResponse)
def signin(credentials: UserLogin, session: Session = Depends(get_session)):
    user = get_user_by_email(session, credentials.email)
    if not user:
        raise UserNotFound()
    if not verify_password(credentials.password, user.password_hash):
        raise Unauthenticated("Invalid password")
    if not user.is_active:
        raise Forbidden("Account is inactive")

    logger.info("User %s signed in", user.id)
    return _auth_response(user)


# ----------------------------------------------------------------------
# ✅ Get Current User
# ----------------------------------------------------------------------
@router.get("", response_model=UserRead)
def get_user(current_user: User = Depends(get_current_user)):
    """Return current user info (decoded from JWT)."""
    return UserRead.model_validate(current_user)


# ----------------------------------------------------------------------
# ✅ Token requests (emailed)
# ----------------------------------------------------------------------
@router.post("/request-activation", response_model=MessageResponse)
def request_activation(body: EmailRequest, session: Session = Depends(get_session)):
    user = get_user_by_email(session, body.email)
    if not user:
        raise UserNotFound()
    return MessageResponse(message="Activation email sent", email_sent=_send_token(session, user, "activation"))


@router.post("/request-password-reset", response_model=MessageResponse)
def request_password_reset(body: EmailRequest, session: Session = Depends(get_session)):
    user = get_user_by_email(session, body.email)
    if not user:
        raise UserNotFound()
    return MessageResponse(message="Password reset email sent", email_sent=_send_token(session, user, "password_reset"))


@router.post("/request-deactivation", response_model=MessageResponse)
def request_deactivation(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return MessageResponse(message="Deactivation email sent", email_sent=_send_token(session, current_user, "deactivation"))


@router.post("/request-deletion", response_model=MessageResponse)
def request_deletion(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return MessageResponse(message="Deletion email sent", email_sent=_send_token(session, current_user, "deletion"))


# ----------------------------------------------------------------------
# ✅ Token consumption
# ----------------------------------------------------------------------
@router.patch("/activate/{token}", response_model=MessageResponse)
def activate_user(token: str, session: Session = Depends(get_session)):
    user = consume_ephemeral_token(session, token)
    user.is_active = True
    delete_ephemeral_token(session, token)
    _save(session, user)
    logger.info("User %s activated", user.id)
    return MessageResponse(message="User activated successfully")


@router.patch("/deactivate/{token}", response_model=MessageResponse)
def deactivate_user(token: str, session: Session = Depends(get_session)):
    user = consume_ephemeral_token(session, token)
    user.is_active = False
    delete_ephemeral_token(session, token)
    _save(session, user)
    logger.info("User %s deactivated", user.id)
    return MessageResponse(message="User deactivated successfully")


@router.patch("/update-password/{token}", response_model=MessageResponse)
def update_password(token: str, body: PasswordUpdate, session: Session = Depends(get_session)):
    user = consume_ephemeral_token(session, token)
    if normalize_email(user.email) != normalize_email(body.email):
        raise InvalidInput("Token does not match the email")

    user.password_hash = hash_password(body.new_password)
    delete_ephemeral_token(session, token)
    _save(session, user)
    return MessageResponse(message="Password updated successfully")


@router.post("/delete/{token}", response_model=MessageResponse)
def delete_account(token: str, session: Session = Depends(get_session)):
    user = consume_ephemeral_token(session, token)
    # Removes the token along with everything else the user owns
    delete_user(session, user)
    return MessageResponse(message="User deleted successfully")


# ----------------------------------------------------------------------
# ✅ Settings
# ----------------------------------------------------------------------
@router.patch("/update-settings", response_model=UserRead)
def update_settings(
    body: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    # Reassign so the JSON column is flagged dirty
    current_user.settings = dict(body.settings)
    return UserRead.model_validate(_save(session, current_user))


# ----------------------------------------------------------------------
# ✅ Membership
# ----------------------------------------------------------------------
@router.get("/verify-membership")
def verify_membership(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    applied, user = MembershipService.reconcile_membership(session, current_user)
    message = "Membership updated successfully" if applied else "No membership update needed"
    return {"message": message, "applied": applied, "user": UserRead.model_validate(user)}


@router.patch("/update-membership")
def update_membership(
    body: MembershipUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    MembershipService.set_membership(session, current_user, body.membership_status, body.expiry)
    session.refresh(current_user)
    return {"message": "Membership updated successfully", "user": UserRead.model_validate(current_user)}


@router.patch("/update-next-membership")
def update_next_membership(
    body: NextMembershipUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    scheduled = MembershipService.schedule_next_membership(
        session, current_user, body.membership_status, body.starts_at, body.expiry
    )
    return {"message": "Next membership updated successfully", "next_membership": scheduled}
