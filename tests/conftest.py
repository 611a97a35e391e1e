"""Shared test fixtures for pytest"""
import os

# Settings are cached on first use, so the environment must be in place before app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ADMIN_SECRET_KEY", "test-admin-secret")
os.environ.setdefault("RBAC_BYPASS_ENABLED", "false")

from collections.abc import Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

import models  # noqa: E402,F401
from core.auth import create_access_token, get_password_hash  # noqa: E402
from core.context import clear_current_user  # noqa: E402
from core.database import Base, get_db, get_db_transactional  # noqa: E402
from core.enums import UserStatus  # noqa: E402
from core.rate_limit import limiter  # noqa: E402
from main import app  # noqa: E402
from models.permission import UserRole  # noqa: E402
from models.user import User  # noqa: E402
from scripts.seed import seed  # noqa: E402

TEST_PASSWORD = "testpass123"


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Fresh SQLite database per test; a file so API and fixture sessions see the same data"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def test_db(session_factory):
    """Session for arranging data and for calling services directly"""
    async with session_factory() as session:
        yield session
    clear_current_user()


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client for API testing"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_db_transactional():
        async with session_factory.begin() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seeded(test_db) -> dict[str, str]:
    """Permission catalog, default roles and admin user. Returns role name -> id"""
    await seed(test_db)
    await test_db.commit()

    from repositories.role_repo import RoleRepository

    roles = await RoleRepository(test_db).list_roles()
    return {role.name: role.id for role in roles}


UserFactory = Callable[..., Awaitable[User]]


@pytest_asyncio.fixture
async def make_user(test_db, seeded) -> UserFactory:
    """Create a user holding the named roles"""
    counter = 0

    async def _make_user(
        *role_names: str,
        email: str | None = None,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        nonlocal counter
        counter += 1
        user = User(
            name=f"Test User {counter}",
            email=email or f"user{counter}@example.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            status=status.value,
        )
        test_db.add(user)
        await test_db.flush()
        for name in role_names:
            test_db.add(UserRole(user_id=user.id, role_id=seeded[name]))
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make_user


def auth_headers_for(user: User) -> dict[str, str]:
    """Bearer header carrying a session token for the user"""
    token = create_access_token(data={"sub": user.id, "email": user.email, "roles": []})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers_for


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user("Admin", email="principal@example.com")


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers_for(admin_user)


@pytest_asyncio.fixture
async def accountant_user(make_user) -> User:
    return await make_user("Accountant", email="accountant@example.com")


@pytest.fixture
def accountant_headers(accountant_user) -> dict[str, str]:
    return auth_headers_for(accountant_user)


@pytest_asyncio.fixture
async def school_data(test_db) -> dict[str, str]:
    """An academic year, a class with one section and two subjects, and one enrolled student"""
    from datetime import date

    from models.academic import AcademicYear, ClassLevel, Section, Subject
    from models.student import Student

    year = AcademicYear(
        name="2024-2025", start_date=date(2024, 9, 1), end_date=date(2025, 6, 30), is_current=True
    )
    class_level = ClassLevel(name="Grade 5", level="Primary")
    test_db.add_all([year, class_level])
    await test_db.flush()

    section = Section(name="A", class_id=class_level.id, capacity=30)
    maths = Subject(name="Mathematics", class_id=class_level.id)
    science = Subject(name="Science", class_id=class_level.id)
    test_db.add_all([section, maths, science])
    await test_db.flush()

    student = Student(
        name="Amina Yusuf",
        date_of_birth=date(2014, 4, 2),
        gender="Female",
        class_id=class_level.id,
        section_id=section.id,
        admission_number="ADM-001",
        admission_date=date(2024, 9, 1),
    )
    test_db.add(student)
    await test_db.commit()

    return {
        "year_id": year.id,
        "class_id": class_level.id,
        "section_id": section.id,
        "maths_id": maths.id,
        "science_id": science.id,
        "student_id": student.id,
    }
