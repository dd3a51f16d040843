from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class TeacherCreate(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    full_name: str = Field(min_length=1, max_length=200)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("full_name")
    @classmethod
    def _collapse_whitespace(cls, v: str) -> str:
        return " ".join(v.split())


class TeacherOut(BaseModel):
    id: uuid.UUID
    code: str
    full_name: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
