# routes/mfa.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from core.config import settings
from core.database import get_session
from core.errors import Forbidden, NotFound
from core.security import get_current_user
from models.models import User
from schemas.user_schema import MessageResponse
from services.email_service import email_service
from services.token_service import (
    consume_ephemeral_token,
    create_ephemeral_token,
    delete_ephemeral_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["MFA"])


# ==========================================================
# ✅ Email a verification token to the signed-in user
# ==========================================================
@router.post("/email-token", response_model=MessageResponse)
def email_token(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    token = create_ephemeral_token(session, current_user)
    sent = email_service.send_token_email(current_user.email, token, "mfa")
    return MessageResponse(message="Verification email sent", email_sent=sent)


# ==========================================================
# ✅ Verify (single use)
# ==========================================================
@router.post("/verify/{token}", response_model=MessageResponse)
def verify_token(
    token: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    owner = consume_ephemeral_token(session, token)
    if owner.id != current_user.id:
        raise Forbidden("Token does not belong to this user")

    delete_ephemeral_token(session, token)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    logger.info("MFA token verified for user %s", current_user.id)
    return MessageResponse(message="Token verified successfully")


# ==========================================================
# ✅ Return the token in the body (development / test only)
# ==========================================================
@router.post("/get-token")
def get_token(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if settings.IS_PRODUCTION:
        raise NotFound()
    return {"token": create_ephemeral_token(session, current_user)}
