from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from core.logging import get_logger
from models.exam import Exam, ExamMark, ExamSchedule
from repositories.academic_repo import AcademicYearRepository
from repositories.exam_repo import ExamMarkRepository, ExamRepository, ExamScheduleRepository
from repositories.student_repo import StudentRepository
from schemas.exam import ExamCreate, ExamScheduleCreate, ExamUpdate, MarkEntry, MarkResponse, ReportCard

logger = get_logger(__name__)

# Lower bound of each grade band, highest first
GRADE_BANDS: list[tuple[Decimal, str]] = [
    (Decimal("90"), "A+"),
    (Decimal("80"), "A"),
    (Decimal("70"), "B"),
    (Decimal("60"), "C"),
    (Decimal("50"), "D"),
]
FAILING_GRADE = "F"


def grade_for(percentage: Decimal) -> str:
    for floor, grade in GRADE_BANDS:
        if percentage >= floor:
            return grade
    return FAILING_GRADE


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open HH:MM intervals; back-to-back sittings do not overlap"""
    return start_a < end_b and start_b < end_a


class ExamService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.exams = ExamRepository(db)
        self.schedules = ExamScheduleRepository(db)
        self.marks = ExamMarkRepository(db)
        self.years = AcademicYearRepository(db)
        self.students = StudentRepository(db)

    async def get_exam(self, exam_id: str) -> Exam:
        exam = await self.exams.get_by_id(exam_id)
        if exam is None:
            raise ResourceNotFoundError("Exam", exam_id)
        return exam

    async def create_exam(self, data: ExamCreate) -> Exam:
        if await self.years.get_by_id(data.academic_year_id) is None:
            raise ResourceNotFoundError("Academic year", data.academic_year_id)
        return await self.exams.create(
            Exam(
                name=data.name,
                academic_year_id=data.academic_year_id,
                term=data.term,
                class_ids=data.class_ids,
                subject_ids=data.subject_ids,
                status=data.status.value,
            )
        )

    async def update_exam(self, exam_id: str, data: ExamUpdate) -> Exam:
        exam = await self.get_exam(exam_id)
        for field, value in data.model_dump(mode="json", exclude_none=True).items():
            setattr(exam, field, value)
        return await self.exams.update(exam)

    async def delete_exam(self, exam_id: str) -> None:
        exam = await self.get_exam(exam_id)
        await self.exams.delete_with_dependents(exam)
        logger.info("Exam %s deleted with its schedules and marks", exam_id)

    async def add_schedule(self, data: ExamScheduleCreate) -> ExamSchedule:
        exam = await self.get_exam(data.exam_id)
        if data.class_id not in exam.class_ids:
            raise ValidationError("Class is not part of this exam", field="class_id")
        if data.subject_id not in exam.subject_ids:
            raise ValidationError("Subject is not part of this exam", field="subject_id")

        for existing in await self.schedules.list_for_class_on(data.class_id, data.exam_date):
            if times_overlap(data.start_time, data.end_time, existing.start_time, existing.end_time):
                raise ConflictError(
                    "Schedule overlaps an existing exam for this class",
                    details={
                        "conflicting_schedule_id": existing.id,
                        "start_time": existing.start_time,
                        "end_time": existing.end_time,
                    },
                )

        return await self.schedules.create(ExamSchedule(**data.model_dump()))

    async def record_mark(self, data: MarkEntry) -> ExamMark:
        """Insert or overwrite the mark for (exam, student, subject)"""
        exam = await self.get_exam(data.exam_id)
        if data.subject_id not in exam.subject_ids:
            raise ValidationError("Subject is not part of this exam", field="subject_id")
        if await self.students.get_live_by_id(data.student_id) is None:
            raise ResourceNotFoundError("Student", data.student_id)

        mark = await self.marks.get_mark(data.exam_id, data.student_id, data.subject_id)
        if mark is None:
            return await self.marks.create(ExamMark(**data.model_dump()))

        mark.marks_obtained = data.marks_obtained
        mark.max_marks = data.max_marks
        return await self.marks.update(mark)

    async def report_card(self, exam_id: str, student_id: str) -> ReportCard:
        await self.get_exam(exam_id)
        marks = await self.marks.list_for_student(exam_id, student_id)
        if not marks:
            raise ResourceNotFoundError("Results", f"{exam_id}/{student_id}")

        total_obtained = sum((Decimal(m.marks_obtained) for m in marks), Decimal("0"))
        total_max = sum((Decimal(m.max_marks) for m in marks), Decimal("0"))
        percentage = (total_obtained / total_max * 100).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        grade = grade_for(percentage)
        passed = grade != FAILING_GRADE

        return ReportCard(
            exam_id=exam_id,
            student_id=student_id,
            marks=[MarkResponse.model_validate(m) for m in marks],
            total_obtained=total_obtained,
            total_max=total_max,
            percentage=percentage,
            grade=grade,
            result="Pass" if passed else "Fail",
            remarks="Promoted to the next class." if passed else "Needs improvement.",
        )
