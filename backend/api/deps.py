from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from core.config import settings
from core.database import get_db
from core.write_guard import ScheduleWriteGuard, build_write_guard
from services.schedule_service import ScheduleService


def get_write_guard(db: Session = Depends(get_db)) -> ScheduleWriteGuard:
    return build_write_guard(settings.write_guard, db)


def get_schedule_service(
    db: Session = Depends(get_db),
    guard: ScheduleWriteGuard = Depends(get_write_guard),
) -> ScheduleService:
    return ScheduleService(db, guard=guard, limits=settings.limits())
