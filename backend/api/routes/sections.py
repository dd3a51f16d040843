from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import get_write_guard
from core.database import get_db
from core.exceptions import DependentRecordsError
from core.write_guard import ScheduleWriteGuard, section_key
from models.schedule import Schedule
from models.section import Section
from schemas.section import SectionCreate, SectionOut
from services.schedule_repository import ScheduleRepository


router = APIRouter()


logger = logging.getLogger(__name__)


def _ensure_unique_section_name(db: Session, name: str) -> None:
    q = select(Section.id).where(Section.name == name)
    if db.execute(q.limit(1)).first() is not None:
        raise HTTPException(status_code=409, detail="SECTION_NAME_ALREADY_EXISTS")


@router.get("/", response_model=list[SectionOut])
def list_sections(db: Session = Depends(get_db)) -> list[SectionOut]:
    q = select(Section).order_by(Section.grade_level.asc(), Section.name.asc())
    return db.execute(q).scalars().all()


@router.post("/", response_model=SectionOut, status_code=201)
def create_section(payload: SectionCreate, db: Session = Depends(get_db)) -> SectionOut:
    name = payload.name.strip()
    _ensure_unique_section_name(db, name)

    section = Section(name=name, grade_level=payload.grade_level)
    db.add(section)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="SECTION_NAME_ALREADY_EXISTS")
    db.refresh(section)
    return section


@router.get("/{section_id}", response_model=SectionOut)
def get_section(section_id: uuid.UUID, db: Session = Depends(get_db)) -> SectionOut:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    return section


@router.delete("/{section_id}", status_code=204)
def delete_section(
    section_id: uuid.UUID,
    db: Session = Depends(get_db),
    guard: ScheduleWriteGuard = Depends(get_write_guard),
) -> Response:
    section = db.get(Section, section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")

    # Sections with schedules must be cleared first; schedules are never cascaded away.
    with guard.hold([section_key(section_id)]):
        count = ScheduleRepository(db).count_for(Schedule.section_id, section_id)
        if count:
            logger.info("Refusing to delete section %s with %d schedule(s)", section_id, count)
            db.rollback()
            raise DependentRecordsError("section", count)

        db.delete(section)
        db.commit()
    return Response(status_code=204)
