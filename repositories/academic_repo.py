from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.academic import AcademicYear, ClassLevel, Section, Subject
from repositories.base import BaseRepository


class AcademicYearRepository(BaseRepository[AcademicYear]):
    conflict_message = "An academic year with this name already exists"
    in_use_message = "This academic year still has exams or other records attached"

    def __init__(self, db: AsyncSession):
        super().__init__(db, AcademicYear)

    async def list_years(self) -> list[AcademicYear]:
        result = await self.db.execute(
            select(AcademicYear).order_by(AcademicYear.start_date.desc())
        )
        return list(result.scalars().all())

    async def clear_current(self, except_id: str | None = None) -> None:
        """Only one academic year may be current"""
        query = update(AcademicYear).where(AcademicYear.is_current.is_(True))
        if except_id:
            query = query.where(AcademicYear.id != except_id)
        await self.db.execute(query.values(is_current=False))


class ClassLevelRepository(BaseRepository[ClassLevel]):
    conflict_message = "A class with this name already exists"
    in_use_message = "This class still has students, exams or other records attached"

    def __init__(self, db: AsyncSession):
        super().__init__(db, ClassLevel)

    async def get_by_name(self, name: str) -> ClassLevel | None:
        result = await self.db.execute(
            select(ClassLevel).where(func.lower(ClassLevel.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def list_classes(self) -> list[ClassLevel]:
        result = await self.db.execute(select(ClassLevel).order_by(ClassLevel.name))
        return list(result.scalars().all())


class SectionRepository(BaseRepository[Section]):
    in_use_message = "This section still has records attached"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Section)

    async def list_for_class(self, class_id: str) -> list[Section]:
        result = await self.db.execute(
            select(Section).where(Section.class_id == class_id).order_by(Section.name)
        )
        return list(result.scalars().all())


class SubjectRepository(BaseRepository[Subject]):
    in_use_message = "This subject still has exam schedules or marks attached"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Subject)

    async def list_for_class(self, class_id: str) -> list[Subject]:
        result = await self.db.execute(
            select(Subject).where(Subject.class_id == class_id).order_by(Subject.name)
        )
        return list(result.scalars().all())
