# core/security.py
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import logging

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from core.database import get_session
from core.config import settings
from core.errors import InvalidToken, Unauthenticated, UserNotFound, Forbidden
from models.models import User

logger = logging.getLogger(__name__)


# ========================================
# 🔑 JWT / APP CONFIG
# ========================================
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM or "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
REFRESH_TOKEN_EXPIRE_DAYS = settings.REFRESH_TOKEN_EXPIRE_DAYS

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# auto_error=False so a missing header surfaces as our own Unauthenticated
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/pmboard/api/v1/users/signin", auto_error=False)


# ========================================
# 🔐 Password Hashing (Argon2)
# ========================================
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password using Argon2."""
    return pwd_context.verify(plain_password, hashed_password)


# ========================================
# 🔑 Token Helpers
# ========================================
def _token_claims(user: User, token_type: str) -> Dict[str, Any]:
    return {"email": user.email, "id": user.id, "tokenType": token_type}


def _encode(data: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.utcnow() + expires_delta})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        _token_claims(user, ACCESS_TOKEN_TYPE),
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(
        _token_claims(user, REFRESH_TOKEN_TYPE),
        expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def create_tokens_for_user(user: User) -> tuple[str, str]:
    """Return (access, refresh) token pair."""
    return create_access_token(user), create_refresh_token(user)


def decode_token(token: str) -> dict:
    """Decode JWT and return payload."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidToken()


def refresh_access_token(session: Session, refresh_token: str) -> str:
    """
    Exchange a refresh token for a new access token.

    The refresh token itself is neither rotated nor revoked; the user is
    re-resolved by the embedded email so deleted accounts stop refreshing.
    """
    payload = decode_token(refresh_token)
    if payload.get("tokenType") != REFRESH_TOKEN_TYPE:
        raise InvalidToken("Invalid refresh token")

    email = payload.get("email")
    user = session.exec(select(User).where(User.email == email)).first() if email else None
    if not user:
        raise UserNotFound()

    return create_access_token(user)


# ========================================
# 👤 Authentication
# ========================================
def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> Optional[User]:
    """Resolve the bearer token to a user, or None when absent/invalid."""
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        logger.debug("Rejected bearer token that failed verification")
        return None

    if payload.get("tokenType") == REFRESH_TOKEN_TYPE:
        return None

    email = payload.get("email")
    if not email:
        return None
    return session.exec(select(User).where(User.email == email)).first()


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Require an authenticated, active user."""
    if user is None:
        raise Unauthenticated()
    if not user.is_active:
        raise Forbidden("Account is inactive")
    return user
