"""Request/response schemas for project CRUD."""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Project name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        return v


class ProjectUpdate(ProjectCreate):
    pass


class ProjectResponse(BaseModel):
    id: uuid.UUID
    name: str
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProjectEnvelope(BaseModel):
    message: str
    project: ProjectResponse


class ProjectListResponse(BaseModel):
    message: str = "Projects retrieved successfully"
    projects: List[ProjectResponse]
