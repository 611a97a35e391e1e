from collections import Counter
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from core.context import get_current_actor_id
from core.enums import AdmissionStatus, AuditAction, PermissionModule, StudentStatus
from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from core.logging import get_logger
from models.academic import ClassLevel
from models.enrollment import Admission, Attendance, Promotion
from models.student import Student
from repositories.academic_repo import (
    AcademicYearRepository,
    ClassLevelRepository,
    SectionRepository,
)
from repositories.audit_log_repo import AuditLogRepository
from repositories.enrollment_repo import (
    AdmissionRepository,
    AttendanceRepository,
    PromotionRepository,
)
from repositories.student_repo import StudentRepository
from schemas.enrollment import AdmissionApprove, AdmissionCreate, AttendanceMark, PromotionCreate

logger = get_logger(__name__)


class EnrollmentService:
    """
    Admissions, daily attendance and class promotions.

    An admission is decided once: approval creates the Student, rejection
    only closes it. Attendance is one mark per student per date.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.admissions = AdmissionRepository(db)
        self.attendance = AttendanceRepository(db)
        self.promotions = PromotionRepository(db)
        self.students = StudentRepository(db)
        self.classes = ClassLevelRepository(db)
        self.sections = SectionRepository(db)
        self.years = AcademicYearRepository(db)
        self.audit_log = AuditLogRepository(db)

    async def _require_class(self, class_id: str) -> ClassLevel:
        class_level = await self.classes.get_by_id(class_id)
        if class_level is None:
            raise ResourceNotFoundError("Class", class_id)
        return class_level

    # Admissions

    async def create_admission(self, data: AdmissionCreate) -> Admission:
        await self._require_class(data.applied_class_id)
        fields = data.model_dump()
        fields["gender"] = data.gender.value
        return await self.admissions.create(
            Admission(**fields, status=AdmissionStatus.PENDING.value)
        )

    async def get_admission(self, admission_id: str) -> Admission:
        admission = await self.admissions.get_by_id(admission_id)
        if admission is None:
            raise ResourceNotFoundError("Admission", admission_id)
        return admission

    async def _get_pending(self, admission_id: str) -> Admission:
        admission = await self.get_admission(admission_id)
        if admission.status != AdmissionStatus.PENDING.value:
            raise ValidationError(
                f"Admission is already {admission.status.lower()}", field="status"
            )
        return admission

    async def approve_admission(self, admission_id: str, data: AdmissionApprove) -> Student:
        admission = await self._get_pending(admission_id)

        if data.section_id:
            section = await self.sections.get_by_id(data.section_id)
            if section is None:
                raise ResourceNotFoundError("Section", data.section_id)
            if section.class_id != admission.applied_class_id:
                raise ValidationError(
                    "Section does not belong to the applied class", field="section_id"
                )

        admission_number = data.admission_number or f"ADM-{admission.id[-8:].upper()}"
        if await self.students.get_by_admission_number(admission_number):
            raise ConflictError(f"Admission number '{admission_number}' is already in use")

        student = await self.students.create(
            Student(
                name=admission.student_name,
                email=admission.email,
                phone=admission.phone,
                address=admission.address,
                date_of_birth=admission.date_of_birth,
                gender=admission.gender,
                class_id=admission.applied_class_id,
                section_id=data.section_id,
                admission_number=admission_number,
                admission_date=admission.admission_date,
                status=StudentStatus.ACTIVE.value,
            )
        )
        await self.admissions.decide(admission, AdmissionStatus.APPROVED, student_id=student.id)
        logger.info("Admission %s approved as student %s", admission.id, student.id)
        return student

    async def reject_admission(self, admission_id: str) -> Admission:
        admission = await self._get_pending(admission_id)
        return await self.admissions.decide(admission, AdmissionStatus.REJECTED)

    # Attendance

    async def mark_attendance(self, data: AttendanceMark) -> list[Attendance]:
        """Upsert the day's marks for a class; a later entry for the same student wins"""
        await self._require_class(data.class_id)
        statuses = {entry.student_id: entry.status for entry in data.records}
        student_ids = list(statuses)

        enrolled = await self.students.get_live_by_ids(student_ids)
        strangers = [
            sid for sid in student_ids
            if sid not in enrolled or enrolled[sid].class_id != data.class_id
        ]
        if strangers:
            raise ValidationError(
                f"Students not enrolled in this class: {', '.join(strangers)}", field="records"
            )

        existing = await self.attendance.get_for_students_on(student_ids, data.attendance_date)
        marked_by = get_current_actor_id()
        records = []
        for student_id, status in statuses.items():
            record = existing.get(student_id)
            if record is None:
                record = Attendance(student_id=student_id, attendance_date=data.attendance_date)
            record.class_id = data.class_id
            record.status = status.value
            record.marked_by = marked_by
            records.append(record)
        await self.attendance.save_all(records)

        await self.audit_log.record(
            action=AuditAction.ATTENDANCE_MARKED,
            entity_type="class",
            entity_id=data.class_id,
            module=PermissionModule.STUDENT.value,
            metadata={
                "date": data.attendance_date.isoformat(),
                "counts": dict(Counter(status.value for status in statuses.values())),
            },
        )
        return sorted(records, key=lambda r: r.student_id)

    async def list_attendance(self, class_id: str, attendance_date: date) -> list[Attendance]:
        await self._require_class(class_id)
        return await self.attendance.list_for_class_on(class_id, attendance_date)

    # Promotions

    async def promote_students(self, data: PromotionCreate) -> tuple[list[Promotion], list[str]]:
        """
        Move students from one class to another and keep a Promotion row each.

        Students who are not (or no longer) in the source class are skipped
        and returned. Sections belong to a class, so promoted students lose theirs.
        """
        if data.from_class_id == data.to_class_id:
            raise ValidationError(
                "Target class must differ from the source class", field="to_class_id"
            )
        from_class = await self._require_class(data.from_class_id)
        to_class = await self._require_class(data.to_class_id)
        if await self.years.get_by_id(data.academic_year_id) is None:
            raise ResourceNotFoundError("Academic year", data.academic_year_id)

        student_ids = list(dict.fromkeys(data.student_ids))
        enrolled = await self.students.get_live_by_ids(student_ids)
        promoted_by = get_current_actor_id()
        promoted: list[Promotion] = []
        skipped: list[str] = []

        for student_id in student_ids:
            student = enrolled.get(student_id)
            if student is None or student.class_id != from_class.id:
                skipped.append(student_id)
                continue

            student.class_id = to_class.id
            student.section_id = None
            await self.students.update(student)
            promoted.append(
                await self.promotions.create(
                    Promotion(
                        student_id=student.id,
                        from_class_id=from_class.id,
                        to_class_id=to_class.id,
                        academic_year_id=data.academic_year_id,
                        promotion_date=data.promotion_date,
                        promoted_by=promoted_by,
                    )
                )
            )

        await self.audit_log.record(
            action=AuditAction.PROMOTED,
            entity_type="class",
            entity_id=from_class.id,
            module=PermissionModule.STUDENT.value,
            metadata={
                "to_class_id": to_class.id,
                "academic_year_id": data.academic_year_id,
                "promoted": [p.student_id for p in promoted],
                "skipped": skipped,
            },
        )
        logger.info(
            "Promoted %d student(s) from %s to %s (%d skipped)",
            len(promoted), from_class.name, to_class.name, len(skipped),
        )
        return promoted, skipped
