"""EnrollmentService: admission decisions, attendance registers and promotions"""

from datetime import date

import pytest
from sqlalchemy import select

from core.enums import AdmissionStatus, AttendanceStatus, Gender
from core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from models.academic import ClassLevel, Section
from models.enrollment import Attendance, Promotion
from models.student import Student
from schemas.enrollment import (
    AdmissionApprove,
    AdmissionCreate,
    AttendanceEntry,
    AttendanceMark,
    PromotionCreate,
)
from services.enrollment_service import EnrollmentService

REGISTER_DAY = date(2025, 2, 3)


def _application(class_id: str, name: str = "Brian Otieno") -> AdmissionCreate:
    return AdmissionCreate(
        student_name=name,
        date_of_birth=date(2014, 6, 12),
        gender=Gender.MALE,
        applied_class_id=class_id,
        admission_date=date(2025, 1, 6),
    )


async def _other_class(db, name: str = "Grade 6") -> tuple[str, str]:
    class_level = ClassLevel(name=name, level="Primary")
    db.add(class_level)
    await db.flush()
    section = Section(name="A", class_id=class_level.id, capacity=30)
    db.add(section)
    await db.flush()
    return class_level.id, section.id


@pytest.mark.asyncio
async def test_admission_starts_pending(test_db, school_data):
    admission = await EnrollmentService(test_db).create_admission(
        _application(school_data["class_id"])
    )

    assert admission.status == AdmissionStatus.PENDING.value
    assert admission.gender == "Male"
    assert admission.student_id is None


@pytest.mark.asyncio
async def test_admission_needs_existing_class(test_db, school_data):
    with pytest.raises(ResourceNotFoundError):
        await EnrollmentService(test_db).create_admission(_application("no-such-class"))


@pytest.mark.asyncio
async def test_approval_enrols_student(test_db, school_data):
    service = EnrollmentService(test_db)
    admission = await service.create_admission(_application(school_data["class_id"]))

    student = await service.approve_admission(
        admission.id, AdmissionApprove(section_id=school_data["section_id"])
    )

    assert student.name == "Brian Otieno"
    assert student.class_id == school_data["class_id"]
    assert student.section_id == school_data["section_id"]
    assert student.admission_number == f"ADM-{admission.id[-8:].upper()}"
    assert student.admission_date == date(2025, 1, 6)
    assert admission.status == AdmissionStatus.APPROVED.value
    assert admission.student_id == student.id


@pytest.mark.asyncio
async def test_admission_is_decided_once(test_db, school_data):
    service = EnrollmentService(test_db)
    admission = await service.create_admission(_application(school_data["class_id"]))
    await service.approve_admission(admission.id, AdmissionApprove())

    with pytest.raises(ValidationError, match="already approved"):
        await service.approve_admission(admission.id, AdmissionApprove())
    with pytest.raises(ValidationError, match="already approved"):
        await service.reject_admission(admission.id)


@pytest.mark.asyncio
async def test_rejected_admission_cannot_be_approved(test_db, school_data):
    service = EnrollmentService(test_db)
    admission = await service.create_admission(_application(school_data["class_id"]))

    rejected = await service.reject_admission(admission.id)

    assert rejected.status == AdmissionStatus.REJECTED.value
    with pytest.raises(ValidationError, match="already rejected"):
        await service.approve_admission(admission.id, AdmissionApprove())


@pytest.mark.asyncio
async def test_approval_section_must_belong_to_applied_class(test_db, school_data):
    service = EnrollmentService(test_db)
    _, foreign_section = await _other_class(test_db)
    admission = await service.create_admission(_application(school_data["class_id"]))

    with pytest.raises(ValidationError) as exc_info:
        await service.approve_admission(admission.id, AdmissionApprove(section_id=foreign_section))

    assert exc_info.value.details["errors"][0]["field"] == "section_id"


@pytest.mark.asyncio
async def test_approval_rejects_taken_admission_number(test_db, school_data):
    service = EnrollmentService(test_db)
    admission = await service.create_admission(_application(school_data["class_id"]))

    with pytest.raises(ConflictError):
        await service.approve_admission(admission.id, AdmissionApprove(admission_number="ADM-001"))

    assert (await service.get_admission(admission.id)).status == AdmissionStatus.PENDING.value


@pytest.mark.asyncio
async def test_remarking_attendance_updates_the_same_row(test_db, school_data):
    service = EnrollmentService(test_db)
    student_id = school_data["student_id"]

    def _register(status: AttendanceStatus) -> AttendanceMark:
        return AttendanceMark(
            class_id=school_data["class_id"],
            attendance_date=REGISTER_DAY,
            records=[AttendanceEntry(student_id=student_id, status=status)],
        )

    first = await service.mark_attendance(_register(AttendanceStatus.ABSENT))
    second = await service.mark_attendance(_register(AttendanceStatus.LATE))

    assert first[0].id == second[0].id
    rows = (await test_db.execute(select(Attendance))).scalars().all()
    assert len(rows) == 1
    assert rows[0].status == AttendanceStatus.LATE.value


@pytest.mark.asyncio
async def test_last_entry_for_a_student_wins(test_db, school_data):
    student_id = school_data["student_id"]
    records = await EnrollmentService(test_db).mark_attendance(
        AttendanceMark(
            class_id=school_data["class_id"],
            attendance_date=REGISTER_DAY,
            records=[
                AttendanceEntry(student_id=student_id, status=AttendanceStatus.ABSENT),
                AttendanceEntry(student_id=student_id, status=AttendanceStatus.PRESENT),
            ],
        )
    )

    assert [r.status for r in records] == [AttendanceStatus.PRESENT.value]


@pytest.mark.asyncio
async def test_attendance_only_for_students_of_the_class(test_db, school_data):
    other_class, _ = await _other_class(test_db)

    with pytest.raises(ValidationError) as exc_info:
        await EnrollmentService(test_db).mark_attendance(
            AttendanceMark(
                class_id=other_class,
                attendance_date=REGISTER_DAY,
                records=[
                    AttendanceEntry(
                        student_id=school_data["student_id"], status=AttendanceStatus.PRESENT
                    )
                ],
            )
        )

    assert exc_info.value.details["errors"][0]["field"] == "records"
    assert school_data["student_id"] in str(exc_info.value)


@pytest.mark.asyncio
async def test_promotion_moves_student_and_clears_section(test_db, school_data):
    service = EnrollmentService(test_db)
    next_class, _ = await _other_class(test_db)

    promoted, skipped = await service.promote_students(
        PromotionCreate(
            student_ids=[school_data["student_id"], school_data["student_id"], "ghost"],
            from_class_id=school_data["class_id"],
            to_class_id=next_class,
            academic_year_id=school_data["year_id"],
            promotion_date=date(2025, 7, 1),
        )
    )

    assert [p.student_id for p in promoted] == [school_data["student_id"]]
    assert skipped == ["ghost"]

    student = await test_db.get(Student, school_data["student_id"])
    assert student.class_id == next_class
    assert student.section_id is None

    history = (await test_db.execute(select(Promotion))).scalars().all()
    assert len(history) == 1
    assert history[0].from_class_id == school_data["class_id"]
    assert history[0].academic_year_id == school_data["year_id"]


@pytest.mark.asyncio
async def test_promotion_skips_students_outside_source_class(test_db, school_data):
    grade_6, _ = await _other_class(test_db)
    grade_7, _ = await _other_class(test_db, name="Grade 7")

    promoted, skipped = await EnrollmentService(test_db).promote_students(
        PromotionCreate(
            student_ids=[school_data["student_id"]],
            from_class_id=grade_6,
            to_class_id=grade_7,
            academic_year_id=school_data["year_id"],
        )
    )

    assert promoted == []
    assert skipped == [school_data["student_id"]]
    assert (await test_db.get(Student, school_data["student_id"])).class_id == school_data[
        "class_id"
    ]


@pytest.mark.asyncio
async def test_promotion_to_same_class(test_db, school_data):
    with pytest.raises(ValidationError) as exc_info:
        await EnrollmentService(test_db).promote_students(
            PromotionCreate(
                student_ids=[school_data["student_id"]],
                from_class_id=school_data["class_id"],
                to_class_id=school_data["class_id"],
                academic_year_id=school_data["year_id"],
            )
        )

    assert exc_info.value.details["errors"][0]["field"] == "to_class_id"


@pytest.mark.asyncio
async def test_promotion_needs_existing_year(test_db, school_data):
    next_class, _ = await _other_class(test_db)

    with pytest.raises(ResourceNotFoundError):
        await EnrollmentService(test_db).promote_students(
            PromotionCreate(
                student_ids=[school_data["student_id"]],
                from_class_id=school_data["class_id"],
                to_class_id=next_class,
                academic_year_id="no-such-year",
            )
        )
