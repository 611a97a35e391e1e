from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_permission
from core.database import get_db, get_db_transactional
from core.enums import PermissionAction, PermissionModule
from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from models.academic import AcademicYear, ClassLevel, Section, Subject
from repositories.academic_repo import (
    AcademicYearRepository,
    ClassLevelRepository,
    SectionRepository,
    SubjectRepository,
)
from repositories.staff_repo import StaffRepository
from schemas.academic import (
    AcademicYearCreate,
    AcademicYearResponse,
    AcademicYearUpdate,
    ClassCreate,
    ClassResponse,
    ClassUpdate,
    SectionCreate,
    SectionResponse,
    SectionUpdate,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
)

router = APIRouter()


def _guard(action: PermissionAction, module: PermissionModule):
    return [Depends(require_permission(action, module))]


async def _require_class(db: AsyncSession, class_id: str) -> ClassLevel:
    class_level = await ClassLevelRepository(db).get_by_id(class_id)
    if not class_level:
        raise ResourceNotFoundError("Class", class_id)
    return class_level


# Academic years

YEAR = PermissionModule.ACADEMIC_YEAR


@router.get(
    "/years",
    response_model=list[AcademicYearResponse],
    dependencies=_guard(PermissionAction.READ, YEAR),
)
async def list_years(db: Annotated[AsyncSession, Depends(get_db)]):
    return await AcademicYearRepository(db).list_years()


@router.post(
    "/years",
    response_model=AcademicYearResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE, YEAR),
)
async def create_year(
    data: AcademicYearCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    repo = AcademicYearRepository(db)
    if data.is_current:
        await repo.clear_current()
    return await repo.create(AcademicYear(**data.model_dump()))


@router.put(
    "/years/{year_id}",
    response_model=AcademicYearResponse,
    dependencies=_guard(PermissionAction.UPDATE, YEAR),
)
async def update_year(
    year_id: str,
    data: AcademicYearUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = AcademicYearRepository(db)
    year = await repo.get_by_id(year_id)
    if not year:
        raise ResourceNotFoundError("Academic year", year_id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(year, field, value)
    if year.end_date <= year.start_date:
        raise ValidationError("end_date must be after start_date", field="end_date")
    if data.is_current:
        await repo.clear_current(except_id=year.id)
    return await repo.update(year)


@router.delete(
    "/years/{year_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_guard(PermissionAction.DELETE, YEAR),
)
async def delete_year(year_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = AcademicYearRepository(db)
    year = await repo.get_by_id(year_id)
    if not year:
        raise ResourceNotFoundError("Academic year", year_id)
    await repo.delete(year)


# Classes

CLASS = PermissionModule.CLASS_LEVEL


@router.get(
    "/classes",
    response_model=list[ClassResponse],
    dependencies=_guard(PermissionAction.READ, CLASS),
)
async def list_classes(db: Annotated[AsyncSession, Depends(get_db)]):
    return await ClassLevelRepository(db).list_classes()


@router.post(
    "/classes",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE, CLASS),
)
async def create_class(data: ClassCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = ClassLevelRepository(db)
    if await repo.get_by_name(data.name):
        raise ConflictError(f"Class '{data.name}' already exists")
    return await repo.create(
        ClassLevel(name=data.name, level=data.level, status=data.status.value)
    )


@router.put(
    "/classes/{class_id}",
    response_model=ClassResponse,
    dependencies=_guard(PermissionAction.UPDATE, CLASS),
)
async def update_class(
    class_id: str, data: ClassUpdate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    repo = ClassLevelRepository(db)
    class_level = await _require_class(db, class_id)
    if data.name is not None and data.name.lower() != class_level.name.lower():
        if await repo.get_by_name(data.name):
            raise ConflictError(f"Class '{data.name}' already exists")
    for field, value in data.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
        setattr(class_level, field, value)
    return await repo.update(class_level)


@router.delete(
    "/classes/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_guard(PermissionAction.DELETE, CLASS),
)
async def delete_class(class_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    await ClassLevelRepository(db).delete(await _require_class(db, class_id))


# Sections

SECTION = PermissionModule.SECTION


@router.get(
    "/sections",
    response_model=list[SectionResponse],
    dependencies=_guard(PermissionAction.READ, SECTION),
)
async def list_sections(
    db: Annotated[AsyncSession, Depends(get_db)],
    class_id: str = Query(..., min_length=1),
):
    return await SectionRepository(db).list_for_class(class_id)


@router.post(
    "/sections",
    response_model=SectionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE, SECTION),
)
async def create_section(
    data: SectionCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    await _require_class(db, data.class_id)
    return await SectionRepository(db).create(Section(**data.model_dump(mode="json")))


@router.put(
    "/sections/{section_id}",
    response_model=SectionResponse,
    dependencies=_guard(PermissionAction.UPDATE, SECTION),
)
async def update_section(
    section_id: str,
    data: SectionUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = SectionRepository(db)
    section = await repo.get_by_id(section_id)
    if not section:
        raise ResourceNotFoundError("Section", section_id)
    for field, value in data.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
        setattr(section, field, value)
    return await repo.update(section)


@router.delete(
    "/sections/{section_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_guard(PermissionAction.DELETE, SECTION),
)
async def delete_section(section_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = SectionRepository(db)
    section = await repo.get_by_id(section_id)
    if not section:
        raise ResourceNotFoundError("Section", section_id)
    await repo.delete(section)


# Subjects

SUBJECT = PermissionModule.SUBJECT


@router.get(
    "/subjects",
    response_model=list[SubjectResponse],
    dependencies=_guard(PermissionAction.READ, SUBJECT),
)
async def list_subjects(
    db: Annotated[AsyncSession, Depends(get_db)],
    class_id: str = Query(..., min_length=1),
):
    return await SubjectRepository(db).list_for_class(class_id)


@router.post(
    "/subjects",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_guard(PermissionAction.CREATE, SUBJECT),
)
async def create_subject(
    data: SubjectCreate, db: Annotated[AsyncSession, Depends(get_db_transactional)]
):
    await _require_class(db, data.class_id)
    if data.teacher_id and not await StaffRepository(db).get_by_id(data.teacher_id):
        raise ResourceNotFoundError("Staff", data.teacher_id)
    return await SubjectRepository(db).create(Subject(**data.model_dump(mode="json")))


@router.put(
    "/subjects/{subject_id}",
    response_model=SubjectResponse,
    dependencies=_guard(PermissionAction.UPDATE, SUBJECT),
)
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    repo = SubjectRepository(db)
    subject = await repo.get_by_id(subject_id)
    if not subject:
        raise ResourceNotFoundError("Subject", subject_id)
    if data.teacher_id and not await StaffRepository(db).get_by_id(data.teacher_id):
        raise ResourceNotFoundError("Staff", data.teacher_id)
    for field, value in data.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
        setattr(subject, field, value)
    return await repo.update(subject)


@router.delete(
    "/subjects/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_guard(PermissionAction.DELETE, SUBJECT),
)
async def delete_subject(subject_id: str, db: Annotated[AsyncSession, Depends(get_db_transactional)]):
    repo = SubjectRepository(db)
    subject = await repo.get_by_id(subject_id)
    if not subject:
        raise ResourceNotFoundError("Subject", subject_id)
    await repo.delete(subject)
