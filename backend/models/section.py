from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class Section(Base):
    __tablename__ = "sections"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    grade_level = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("name", name="uq_sections_name"),
        CheckConstraint("grade_level is null or grade_level >= 1", name="ck_sections_grade_level"),
    )
