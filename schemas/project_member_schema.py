# project_member_schema.py
from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime


class ProjectMemberCreate(BaseModel):
    user_id: str
    role: str = "MEMBER"


class ProjectMemberRoleUpdate(BaseModel):
    role: str


class ProjectMemberStatusUpdate(BaseModel):
    member_status: str


class ProjectMemberRead(BaseModel):
    id: str
    project_id: str
    user_id: str
    role: str
    member_status: str
    created_at: datetime
    # Filled from the linked user when listing
    email: Optional[EmailStr] = None
    name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
