from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.enums import AdmissionStatus, AuditAction, PermissionModule
from models.enrollment import Admission, Attendance, Promotion
from repositories.auditable_repo import AuditableRepository, audit_fields
from repositories.base import BaseRepository


class AdmissionRepository(AuditableRepository[Admission]):
    entity_type = "admission"
    module = PermissionModule.STUDENT

    def __init__(self, db: AsyncSession):
        super().__init__(db, Admission)

    def _serialize_for_audit(self, obj: Admission) -> dict[str, Any]:
        return audit_fields(obj, "id", "student_name", "applied_class_id", "status", "student_id")

    async def decide(
        self, admission: Admission, status: AdmissionStatus, student_id: str | None = None
    ) -> Admission:
        """Close a pending admission; the audit entry records the decision itself"""
        admission.status = status.value
        admission.student_id = student_id
        await self._flush()
        approved = status == AdmissionStatus.APPROVED
        await self.emit_audit(AuditAction.APPROVED if approved else AuditAction.REJECTED, admission)
        return admission

    async def list_admissions(self, status: AdmissionStatus | None = None) -> list[Admission]:
        query = select(Admission).order_by(Admission.admission_date.desc(), Admission.student_name)
        if status:
            query = query.where(Admission.status == status.value)
        result = await self.db.execute(query)
        return list(result.scalars().all())


class AttendanceRepository(BaseRepository[Attendance]):
    conflict_message = "Attendance for this student and date was recorded concurrently"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Attendance)

    async def save_all(self, records: list[Attendance]) -> list[Attendance]:
        self.db.add_all(records)
        await self._flush()
        return records

    async def get_for_students_on(
        self, student_ids: list[str], attendance_date: date
    ) -> dict[str, Attendance]:
        """Existing marks on a date, keyed by student id"""
        result = await self.db.execute(
            select(Attendance).where(
                Attendance.student_id.in_(student_ids),
                Attendance.attendance_date == attendance_date,
            )
        )
        return {record.student_id: record for record in result.scalars().all()}

    async def list_for_class_on(self, class_id: str, attendance_date: date) -> list[Attendance]:
        result = await self.db.execute(
            select(Attendance)
            .where(Attendance.class_id == class_id, Attendance.attendance_date == attendance_date)
            .order_by(Attendance.student_id)
        )
        return list(result.scalars().all())


class PromotionRepository(BaseRepository[Promotion]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, Promotion)

    async def list_promotions(self, student_id: str | None = None) -> list[Promotion]:
        query = select(Promotion).order_by(Promotion.promotion_date.desc())
        if student_id:
            query = query.where(Promotion.student_id == student_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
