from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("code", name="uq_subjects_code"),
    )
