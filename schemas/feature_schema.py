# feature_schema.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class FeatureCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)


class FeatureRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    project_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
