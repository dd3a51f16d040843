from __future__ import annotations

from fastapi import APIRouter

from api.routes import schedules, sections, subjects, teachers


api_router = APIRouter()
api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
api_router.include_router(teachers.router, prefix="/teachers", tags=["teachers"])
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"])
api_router.include_router(sections.router, prefix="/sections", tags=["sections"])
