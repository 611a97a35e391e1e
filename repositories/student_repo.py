from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import AuditAction, PermissionModule, StudentStatus
from models.student import Student
from repositories.auditable_repo import AuditableRepository, audit_fields


class StudentRepository(AuditableRepository[Student]):
    entity_type = "student"
    module = PermissionModule.STUDENT
    conflict_message = "A student with this admission number already exists"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Student)

    def _serialize_for_audit(self, obj: Student) -> dict[str, Any]:
        return audit_fields(obj, "id", "name", "admission_number", "class_id", "status")

    async def get_live_by_id(self, student_id: str) -> Student | None:
        result = await self.db.execute(
            select(Student).where(Student.id == student_id, Student.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_live_by_ids(self, student_ids: list[str]) -> dict[str, Student]:
        result = await self.db.execute(
            select(Student).where(Student.id.in_(student_ids), Student.deleted_at.is_(None))
        )
        return {student.id: student for student in result.scalars().all()}

    async def get_by_admission_number(self, admission_number: str) -> Student | None:
        result = await self.db.execute(
            select(Student).where(Student.admission_number == admission_number)
        )
        return result.scalar_one_or_none()

    async def list_students(
        self,
        class_id: str | None = None,
        status: StudentStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Student]:
        query = select(Student).where(Student.deleted_at.is_(None))
        if class_id:
            query = query.where(Student.class_id == class_id)
        if status:
            query = query.where(Student.status == status.value)
        result = await self.db.execute(
            query.order_by(Student.name).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def soft_delete(self, student: Student) -> None:
        student.deleted_at = datetime.now(UTC)
        await self._flush()
        await self.emit_audit(AuditAction.DELETED, student)
