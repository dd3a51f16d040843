from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Text, Time, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from models.base import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.id"), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    section_id = Column(Uuid(as_uuid=True), ForeignKey("sections.id"), nullable=False)

    school_year = Column(Text, nullable=False)
    quarter = Column(Text, nullable=False)

    # Canonical day literal, e.g. "MWF" or "TTH".
    days = Column(Text, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    teacher = relationship("Teacher", lazy="joined")
    subject = relationship("Subject", lazy="joined")
    section = relationship("Section", lazy="joined")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedules_time_order"),
        CheckConstraint("quarter in ('Q1', 'Q2', 'Q3', 'Q4')", name="ck_schedules_quarter"),
        Index("ix_schedules_teacher_id", "teacher_id"),
        Index("ix_schedules_section_id", "section_id"),
        Index("ix_schedules_subject_section_days", "subject_id", "section_id", "days"),
    )
