# routes/auth.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.database import get_session
from core.security import refresh_access_token
from schemas.user_schema import RefreshRequest

router = APIRouter(tags=["Authentication"])


# ==========================================================
# ✅ Refresh: trade a refresh token for a new access token
# ==========================================================
@router.post("/refresh")
def refresh(body: RefreshRequest, session: Session = Depends(get_session)):
    return {"a": refresh_access_token(session, body.r)}
