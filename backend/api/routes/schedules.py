from __future__ import annotations

import uuid
from dataclasses import asdict
from datetime import time

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.deps import get_schedule_service
from conflicts.entries import Quarter
from conflicts.intervals import DayPattern
from schemas.schedule import (
    ScheduleConflictOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    ScheduleValidateRequest,
    ValidationResultOut,
    ViolationOut,
)
from services.schedule_repository import ScheduleFilters
from services.schedule_service import ScheduleService


router = APIRouter()


def _days_param(days: str) -> str:
    try:
        return DayPattern.parse(days).literal
    except ValueError as exc:
        raise HTTPException(status_code=422, detail="INVALID_DAYS") from exc


def _quarter_param(quarter: str) -> Quarter:
    try:
        return Quarter.parse(quarter)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail="INVALID_QUARTER") from exc


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    teacher_id: uuid.UUID | None = Query(default=None),
    section_id: uuid.UUID | None = Query(default=None),
    subject_id: uuid.UUID | None = Query(default=None),
    days: str | None = Query(default=None),
    school_year: str | None = Query(default=None),
    quarter: str | None = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleOut]:
    filters = ScheduleFilters(
        teacher_id=teacher_id,
        section_id=section_id,
        subject_id=subject_id,
        days=_days_param(days) if days else None,
        school_year=school_year,
        quarter=_quarter_param(quarter) if quarter else None,
    )
    return service.list_schedules(filters)


@router.post("/", response_model=ScheduleOut, status_code=201)
def create_schedule(
    payload: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.create_schedule(payload)


@router.post("/validate", response_model=ValidationResultOut)
def validate_schedule(
    payload: ScheduleValidateRequest,
    service: ScheduleService = Depends(get_schedule_service),
) -> ValidationResultOut:
    result = service.preview_schedule(payload, exclude_schedule_id=payload.exclude_schedule_id)
    return ValidationResultOut(
        valid=result.valid,
        violation=ViolationOut(**result.violation.as_dict()) if result.violation else None,
        violations=[ViolationOut(**v.as_dict()) for v in result.violations],
    )


@router.get("/conflicts/section", response_model=list[ScheduleConflictOut])
def section_conflicts(
    section_id: uuid.UUID,
    days: str,
    start_time: time,
    end_time: time,
    exclude_schedule_id: uuid.UUID | None = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleConflictOut]:
    conflicts = service.section_conflicts(
        section_id,
        _days_param(days),
        start_time,
        end_time,
        exclude_schedule_id=exclude_schedule_id,
    )
    return [ScheduleConflictOut(**asdict(c)) for c in conflicts]


@router.get("/conflicts/teacher", response_model=list[ScheduleConflictOut])
def teacher_conflicts(
    teacher_id: uuid.UUID,
    days: str,
    start_time: time,
    end_time: time,
    exclude_schedule_id: uuid.UUID | None = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleConflictOut]:
    conflicts = service.teacher_conflicts(
        teacher_id,
        _days_param(days),
        start_time,
        end_time,
        exclude_schedule_id=exclude_schedule_id,
    )
    return [ScheduleConflictOut(**asdict(c)) for c in conflicts]


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(
    schedule_id: uuid.UUID,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def put_schedule(
    schedule_id: uuid.UUID,
    payload: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleOut:
    return service.update_schedule(schedule_id, payload)


@router.delete("/{schedule_id}", status_code=204)
def delete_schedule(
    schedule_id: uuid.UUID,
    service: ScheduleService = Depends(get_schedule_service),
) -> Response:
    service.delete_schedule(schedule_id)
    return Response(status_code=204)
