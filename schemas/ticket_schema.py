# ticket_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from .project_member_schema import ProjectMemberRead


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    feature_id: int
    status: Optional[str] = None
    priority: Optional[str] = None
    section: Optional[str] = None


class TicketRead(BaseModel):
    id: str
    title: str
    description: str
    status: str
    priority: str
    section: str
    time_log: float
    feature_id: int
    created_at: datetime
    updated_at: datetime
    assignees: List[ProjectMemberRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class TicketUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    status: Optional[str] = None
    priority: Optional[str] = None
    section: Optional[str] = None
    feature_id: Optional[int] = None


# Single-field updates
class TicketTitleUpdate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class TicketDescriptionUpdate(BaseModel):
    description: str = Field(..., max_length=5000)


class TicketStatusUpdate(BaseModel):
    status: str


class TicketPriorityUpdate(BaseModel):
    priority: str


class TicketSectionUpdate(BaseModel):
    section: str


class TimeLogUpdate(BaseModel):
    time_log: Optional[float] = None


class AssigneeRequest(BaseModel):
    user_id: str
