from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule, StudentStatus
from core.exceptions import ConflictError, ResourceNotFoundError
from models.student import Student
from repositories.academic_repo import ClassLevelRepository, SectionRepository
from repositories.student_repo import StudentRepository
from schemas.student import StudentCreate, StudentResponse, StudentUpdate

router = APIRouter()

MODULE = PermissionModule.STUDENT


async def _get_student_or_404(repo: StudentRepository, student_id: str) -> Student:
    student = await repo.get_live_by_id(student_id)
    if not student:
        raise ResourceNotFoundError("Student", student_id)
    return student


async def _check_placement(db: AsyncSession, class_id: str | None, section_id: str | None) -> None:
    if class_id and not await ClassLevelRepository(db).get_by_id(class_id):
        raise ResourceNotFoundError("Class", class_id)
    if section_id and not await SectionRepository(db).get_by_id(section_id):
        raise ResourceNotFoundError("Section", section_id)


@router.get(
    "",
    response_model=list[StudentResponse],
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def list_students(
    db: Annotated[AsyncSession, Depends(get_db)],
    class_id: str | None = None,
    status_filter: StudentStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    return await StudentRepository(db).list_students(
        class_id=class_id, status=status_filter, skip=skip, limit=limit
    )


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(PermissionAction.CREATE, MODULE))],
)
async def create_student(
    data: StudentCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    repo = StudentRepository(db)
    if await repo.get_by_admission_number(data.admission_number):
        raise ConflictError(f"Admission number '{data.admission_number}' is already in use")
    await _check_placement(db, data.class_id, data.section_id)

    fields = data.model_dump()
    fields.update(gender=data.gender.value, status=data.status.value)
    return await repo.create(Student(**fields))


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_permission(PermissionAction.READ, MODULE))],
)
async def get_student(student_id: str, db: Annotated[AsyncSession, Depends(get_db)]):
    return await _get_student_or_404(StudentRepository(db), student_id)


@router.put(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(require_permission(PermissionAction.UPDATE, MODULE))],
)
async def update_student(
    student_id: str,
    data: StudentUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = StudentRepository(db)
    student = await _get_student_or_404(repo, student_id)
    await _check_placement(db, data.class_id, data.section_id)

    for field, value in data.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
        setattr(student, field, value)
    return await repo.update(student)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(PermissionAction.DELETE, MODULE))],
)
async def delete_student(student_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    """Soft delete; the admission number stays reserved"""
    repo = StudentRepository(db)
    await repo.soft_delete(await _get_student_or_404(repo, student_id))
