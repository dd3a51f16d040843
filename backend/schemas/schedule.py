from __future__ import annotations

import uuid
from datetime import datetime, time

from pydantic import BaseModel, Field, field_serializer, field_validator

from conflicts.entries import Quarter
from conflicts.intervals import DayPattern, to_time_of_day


def _coerce_time_of_day(value):
    # Clients may send full date-times; only the time of day is kept.
    if isinstance(value, datetime):
        return to_time_of_day(value)
    if isinstance(value, str) and ("T" in value or " " in value.strip()):
        raw = value.strip()
        # fromisoformat only accepts a "Z" suffix from Python 3.11.
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            return to_time_of_day(datetime.fromisoformat(raw))
        except ValueError:
            return value
    return value


class ScheduleBase(BaseModel):
    teacher_id: uuid.UUID
    subject_id: uuid.UUID
    section_id: uuid.UUID
    school_year: str = Field(min_length=1, max_length=20)
    quarter: Quarter
    days: str = Field(min_length=1, max_length=10)
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _time_of_day(cls, value):
        return _coerce_time_of_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _drop_tz(cls, value: time) -> time:
        return value.replace(tzinfo=None)

    @field_validator("days")
    @classmethod
    def _canonical_days(cls, value: str) -> str:
        return DayPattern.parse(value).literal

    @field_validator("quarter", mode="before")
    @classmethod
    def _parse_quarter(cls, value):
        if isinstance(value, str):
            return Quarter.parse(value)
        return value

    @field_validator("school_year")
    @classmethod
    def _strip_school_year(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("school_year must not be blank")
        return value


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleUpdate(ScheduleBase):
    """Full replacement; every field is required."""


class ScheduleValidateRequest(ScheduleBase):
    exclude_schedule_id: uuid.UUID | None = None


class TeacherSummary(BaseModel):
    id: uuid.UUID
    code: str
    full_name: str

    class Config:
        from_attributes = True


class SubjectSummary(BaseModel):
    id: uuid.UUID
    code: str
    name: str

    class Config:
        from_attributes = True


class SectionSummary(BaseModel):
    id: uuid.UUID
    name: str
    grade_level: int | None = None

    class Config:
        from_attributes = True


class ScheduleOut(BaseModel):
    id: uuid.UUID
    teacher: TeacherSummary
    subject: SubjectSummary
    section: SectionSummary
    school_year: str
    quarter: str
    days: str
    start_time: time
    end_time: time
    created_at: datetime
    updated_at: datetime

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")

    class Config:
        from_attributes = True


class ScheduleConflictOut(BaseModel):
    conflicting_schedule_id: uuid.UUID
    teacher_name: str
    subject_name: str
    section_name: str
    days: str
    start_time: str
    end_time: str
    conflict_reason: str


class ViolationOut(BaseModel):
    kind: str
    code: str
    message: str
    conflicting_schedule_id: str | None = None


class ValidationResultOut(BaseModel):
    valid: bool
    violation: ViolationOut | None = None
    violations: list[ViolationOut] = Field(default_factory=list)
