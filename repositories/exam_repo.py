from datetime import date
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import PermissionModule
from models.exam import Exam, ExamMark, ExamSchedule
from repositories.auditable_repo import AuditableRepository, audit_fields
from repositories.base import BaseRepository


class ExamRepository(AuditableRepository[Exam]):
    entity_type = "exam"
    module = PermissionModule.ACADEMIC_YEAR

    def __init__(self, db: AsyncSession):
        super().__init__(db, Exam)

    def _serialize_for_audit(self, obj: Exam) -> dict[str, Any]:
        return audit_fields(obj, "id", "name", "academic_year_id", "term", "status")

    async def list_exams(self, academic_year_id: str | None = None) -> list[Exam]:
        query = select(Exam).order_by(Exam.created_at.desc())
        if academic_year_id:
            query = query.where(Exam.academic_year_id == academic_year_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def delete_with_dependents(self, exam: Exam) -> None:
        """Remove schedules and marks explicitly; SQLite does not enforce FK cascades"""
        await self.db.execute(delete(ExamSchedule).where(ExamSchedule.exam_id == exam.id))
        await self.db.execute(delete(ExamMark).where(ExamMark.exam_id == exam.id))
        await self.delete(exam)


class ExamScheduleRepository(BaseRepository[ExamSchedule]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, ExamSchedule)

    async def list_for_exam(self, exam_id: str) -> list[ExamSchedule]:
        result = await self.db.execute(
            select(ExamSchedule)
            .where(ExamSchedule.exam_id == exam_id)
            .order_by(ExamSchedule.exam_date, ExamSchedule.start_time)
        )
        return list(result.scalars().all())

    async def list_for_class_on(self, class_id: str, exam_date: date) -> list[ExamSchedule]:
        result = await self.db.execute(
            select(ExamSchedule).where(
                ExamSchedule.class_id == class_id, ExamSchedule.exam_date == exam_date
            )
        )
        return list(result.scalars().all())


class ExamMarkRepository(BaseRepository[ExamMark]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, ExamMark)

    async def get_mark(self, exam_id: str, student_id: str, subject_id: str) -> ExamMark | None:
        result = await self.db.execute(
            select(ExamMark).where(
                ExamMark.exam_id == exam_id,
                ExamMark.student_id == student_id,
                ExamMark.subject_id == subject_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_student(self, exam_id: str, student_id: str) -> list[ExamMark]:
        result = await self.db.execute(
            select(ExamMark).where(
                ExamMark.exam_id == exam_id, ExamMark.student_id == student_id
            )
        )
        return list(result.scalars().all())
