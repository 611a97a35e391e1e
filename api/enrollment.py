from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import AdmissionStatus, PermissionAction, PermissionModule
from repositories.enrollment_repo import AdmissionRepository, PromotionRepository
from schemas.enrollment import (
    AdmissionApprove,
    AdmissionCreate,
    AdmissionResponse,
    AttendanceMark,
    AttendanceResponse,
    PromotionCreate,
    PromotionResponse,
    PromotionResult,
)
from schemas.student import StudentResponse
from services.enrollment_service import EnrollmentService

router = APIRouter()

MODULE = PermissionModule.STUDENT


def _guard(action: PermissionAction):
    return [Depends(require_permission(action, MODULE))]


@router.get(
    "/admissions",
    response_model=list[AdmissionResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_admissions(
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: AdmissionStatus | None = Query(None, alias="status"),
):
    return await AdmissionRepository(db).list_admissions(status_filter)


@router.post(
    "/admissions",
    response_model=AdmissionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE),
)
async def create_admission(
    data: AdmissionCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    return await EnrollmentService(db).create_admission(data)


@router.get(
    "/admissions/{admission_id}",
    response_model=AdmissionResponse,
    dependencies=_guard(PermissionAction.READ),
)
async def get_admission(admission_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return await EnrollmentService(db).get_admission(admission_id)


@router.post(
    "/admissions/{admission_id}/approve",
    response_model=StudentResponse,
    dependencies=_guard(PermissionAction.CREATE),
)
async def approve_admission(
    admission_id: str,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    data: AdmissionApprove | None = None,
):
    """Enrol the applicant; returns the new student"""
    return await EnrollmentService(db).approve_admission(admission_id, data or AdmissionApprove())


@router.post(
    "/admissions/{admission_id}/reject",
    response_model=AdmissionResponse,
    dependencies=_guard(PermissionAction.UPDATE),
)
async def reject_admission(
    admission_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    return await EnrollmentService(db).reject_admission(admission_id)


@router.get(
    "/attendance",
    response_model=list[AttendanceResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_attendance(
    class_id: str,
    attendance_date: date,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await EnrollmentService(db).list_attendance(class_id, attendance_date)


@router.post(
    "/attendance",
    response_model=list[AttendanceResponse],
    dependencies=_guard(PermissionAction.UPDATE),
)
async def mark_attendance(
    data: AttendanceMark, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    """Record (or correct) a class register for one day"""
    return await EnrollmentService(db).mark_attendance(data)


@router.get(
    "/promotions",
    response_model=list[PromotionResponse],
    dependencies=_guard(PermissionAction.READ),
)
async def list_promotions(
    db: Annotated[AsyncSession, Depends(get_db)],
    student_id: str | None = None,
):
    return await PromotionRepository(db).list_promotions(student_id)


@router.post(
    "/promotions",
    response_model=PromotionResult,
    dependencies=_guard(PermissionAction.UPDATE),
)
async def promote_students(
    data: PromotionCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    promoted, skipped = await EnrollmentService(db).promote_students(data)
    return PromotionResult(
        promoted=[PromotionResponse.model_validate(p) for p in promoted],
        skipped=skipped,
    )
