from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SectionBase(BaseModel):
    name: str = Field(min_length=1)
    grade_level: int | None = Field(default=None, ge=1)


class SectionCreate(SectionBase):
    pass


class SectionOut(SectionBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
