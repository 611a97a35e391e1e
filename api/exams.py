from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule
from repositories.exam_repo import ExamRepository, ExamScheduleRepository
from schemas.exam import (
    ExamCreate,
    ExamResponse,
    ExamScheduleCreate,
    ExamScheduleResponse,
    ExamUpdate,
    MarkEntry,
    MarkResponse,
    ReportCard,
)
from services.exam_service import ExamService

router = APIRouter()

# Exams and timetables belong to the academic calendar; marks are student records
EXAM = PermissionModule.ACADEMIC_YEAR
RESULTS = PermissionModule.STUDENT


@router.get(
    "/exams",
    response_model=list[ExamResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, EXAM))],
)
async def list_exams(
    db: Annotated[AsyncSession, Depends(get_db)],
    academic_year_id: str | None = None,
):
    return await ExamRepository(db).list_exams(academic_year_id)


@router.post(
    "/exams",
    response_model=ExamResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(PermissionAction.CREATE, EXAM))],
)
async def create_exam(data: ExamCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    return await ExamService(db).create_exam(data)


@router.get(
    "/exams/{exam_id}",
    response_model=ExamResponse,
    dependencies=[Depends(require_permission(PermissionAction.READ, EXAM))],
)
async def get_exam(exam_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return await ExamService(db).get_exam(exam_id)


@router.put(
    "/exams/{exam_id}",
    response_model=ExamResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, EXAM))],
)
async def update_exam(
    exam_id: str, data: ExamUpdate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    return await ExamService(db).update_exam(exam_id, data)


@router.delete(
    "/exams/{exam_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, EXAM))],
)
async def delete_exam(exam_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Deletes the exam along with its schedules and marks"""
    await ExamService(db).delete_exam(exam_id)


@router.get(
    "/schedules",
    response_model=list[ExamScheduleResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, EXAM))],
)
async def list_schedules(
    db: Annotated[AsyncSession, Depends(get_db)],
    exam_id: str = Query(..., min_length=1),
):
    return await ExamScheduleRepository(db).list_for_exam(exam_id)


@router.post(
    "/schedules",
    response_model=ExamScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(PermissionAction.CREATE, EXAM))],
)
async def create_schedule(
    data: ExamScheduleCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    """409 when the class already sits another paper in an overlapping slot"""
    return await ExamService(db).add_schedule(data)


@router.post(
    "/marks",
    response_model=MarkResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, RESULTS))],
)
async def record_mark(data: MarkEntry, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    return await ExamService(db).record_mark(data)


@router.get(
    "/results",
    response_model=ReportCard,
    dependencies=[Depends(require_permission(PermissionAction.READ, RESULTS))],
)
async def get_results(
    db: Annotated[AsyncSession, Depends(get_db)],
    exam_id: str = Query(..., min_length=1),
    student_id: str = Query(..., min_length=1),
):
    return await ExamService(db).report_card(exam_id, student_id)
