# project_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime

from .feature_schema import FeatureRead
from .project_member_schema import ProjectMemberRead


class ProjectCreate(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    project_type: str = "KANBAN"
    # owner_id is set server-side


class ProjectRead(BaseModel):
    id: str
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    project_type: str
    status: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    features: List[FeatureRead] = Field(default_factory=list)
    members: List[ProjectMemberRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ProjectDescriptionUpdate(BaseModel):
    description: str = Field(..., max_length=1000)


class ProjectStatusUpdate(BaseModel):
    status: Optional[str] = None
