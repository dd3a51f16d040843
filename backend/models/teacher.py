from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("code", name="uq_teachers_code"),
    )
