from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import get_write_guard
from core.database import get_db
from core.exceptions import DependentRecordsError
from core.write_guard import ScheduleWriteGuard, teacher_key
from models.schedule import Schedule
from models.teacher import Teacher
from schemas.teacher import TeacherCreate, TeacherOut
from services.schedule_repository import ScheduleRepository


router = APIRouter()


@router.get("/", response_model=list[TeacherOut])
def list_teachers(db: Session = Depends(get_db)) -> list[TeacherOut]:
    q = select(Teacher).order_by(Teacher.full_name.asc())
    return db.execute(q).scalars().all()


@router.post("/", response_model=TeacherOut, status_code=201)
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="TEACHER_CODE_ALREADY_EXISTS")
    db.refresh(teacher)
    return teacher


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(teacher_id: uuid.UUID, db: Session = Depends(get_db)) -> TeacherOut:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")
    return teacher


@router.delete("/{teacher_id}", status_code=204)
def delete_teacher(
    teacher_id: uuid.UUID,
    db: Session = Depends(get_db),
    guard: ScheduleWriteGuard = Depends(get_write_guard),
) -> Response:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")

    # Same key as schedule writes, so no entry can be added between count and delete.
    with guard.hold([teacher_key(teacher_id)]):
        count = ScheduleRepository(db).count_for(Schedule.teacher_id, teacher_id)
        if count:
            db.rollback()
            raise DependentRecordsError("teacher", count)

        db.delete(teacher)
        db.commit()
    return Response(status_code=204)
