# user_schema.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime

from models.models import MembershipStatus, MembershipDuration


# ---------------------------
# Create & Auth
# ---------------------------
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(default=None, max_length=100)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class EmailRequest(BaseModel):
    email: EmailStr


class RefreshRequest(BaseModel):
    r: str = Field(..., min_length=1)  # refresh token


# ---------------------------
# Read
# ---------------------------
class MembershipRead(BaseModel):
    status: MembershipStatus
    started_at: datetime
    ends_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NextMembershipRead(BaseModel):
    status: MembershipStatus
    starts_at: datetime
    ends_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserRead(BaseModel):
    id: str
    email: EmailStr
    name: Optional[str] = None
    is_active: bool
    settings: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    membership: Optional[MembershipRead] = None
    next_membership: Optional[NextMembershipRead] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserRead
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    email_sent: Optional[bool] = None


# ---------------------------
# Updates
# ---------------------------
class SettingsUpdate(BaseModel):
    settings: Dict[str, Any]


class PasswordUpdate(BaseModel):
    email: EmailStr
    new_password: str = Field(..., min_length=8)


class MembershipUpdate(BaseModel):
    membership_status: str
    expiry: str


class NextMembershipUpdate(BaseModel):
    membership_status: str
    starts_at: datetime
    expiry: str


class MessageResponse(BaseModel):
    message: str
    email_sent: Optional[bool] = None
