"""Deleting academic records that other rows still point at"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.database import Base
from core.exceptions import ConflictError
from models.academic import AcademicYear, ClassLevel, Section, Subject
from models.exam import Exam
from models.student import Student
from repositories.academic_repo import (
    AcademicYearRepository,
    ClassLevelRepository,
    SubjectRepository,
)


@pytest_asyncio.fixture
async def fk_db(tmp_path):
    """Session on a SQLite database that enforces foreign keys like PostgreSQL does"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fk.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)() as session:
        yield session

    await engine.dispose()


async def _class_with_student(db) -> ClassLevel:
    class_level = ClassLevel(name="Grade 7", level="Primary")
    db.add(class_level)
    await db.flush()
    db.add(
        Student(
            name="Hodan Ali",
            date_of_birth=date(2012, 1, 15),
            gender="Female",
            class_id=class_level.id,
            admission_number="ADM-700",
            admission_date=date(2024, 9, 1),
        )
    )
    await db.commit()
    return class_level


@pytest.mark.asyncio
async def test_class_with_students_cannot_be_deleted(fk_db):
    class_level = await _class_with_student(fk_db)

    with pytest.raises(ConflictError, match="still has students") as exc_info:
        await ClassLevelRepository(fk_db).delete(class_level)

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_year_with_exams_cannot_be_deleted(fk_db):
    year = AcademicYear(name="2024-2025", start_date=date(2024, 9, 1), end_date=date(2025, 6, 30))
    fk_db.add(year)
    await fk_db.flush()
    fk_db.add(
        Exam(
            name="Mid-term",
            academic_year_id=year.id,
            term="Term 1",
            class_ids=["c1"],
            subject_ids=["s1"],
        )
    )
    await fk_db.commit()

    with pytest.raises(ConflictError, match="still has exams"):
        await AcademicYearRepository(fk_db).delete(year)


@pytest.mark.asyncio
async def test_unreferenced_class_deletes_with_its_sections(fk_db):
    class_level = ClassLevel(name="Grade 8", level="Primary")
    fk_db.add(class_level)
    await fk_db.flush()
    fk_db.add(Section(name="A", class_id=class_level.id, capacity=25))
    subject = Subject(name="Geography", class_id=class_level.id)
    fk_db.add(subject)
    await fk_db.commit()

    await SubjectRepository(fk_db).delete(subject)
    await ClassLevelRepository(fk_db).delete(class_level)
    await fk_db.commit()

    assert await ClassLevelRepository(fk_db).get_by_id(class_level.id) is None
