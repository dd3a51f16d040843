from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import DependentRecordsError
from models.schedule import Schedule
from models.subject import Subject
from schemas.subject import SubjectCreate, SubjectOut
from services.schedule_repository import ScheduleRepository


router = APIRouter()


@router.get("/", response_model=list[SubjectOut])
def list_subjects(db: Session = Depends(get_db)) -> list[SubjectOut]:
    return db.execute(select(Subject).order_by(Subject.code.asc())).scalars().all()


@router.post("/", response_model=SubjectOut, status_code=201)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    data = payload.model_dump()
    data["code"] = data["code"].strip().upper()
    subject = Subject(**data)
    db.add(subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SUBJECT_CODE_ALREADY_EXISTS")
    db.refresh(subject)
    return subject


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)) -> SubjectOut:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")
    return subject


@router.delete("/{subject_id}", status_code=204)
def delete_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail="SUBJECT_NOT_FOUND")

    count = ScheduleRepository(db).count_for(Schedule.subject_id, subject_id)
    if count:
        raise DependentRecordsError("subject", count)

    db.delete(subject)
    db.commit()
    return Response(status_code=204)
