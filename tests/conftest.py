"""
Pytest fixtures for training academy tests.
"""

import os
import tempfile
import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional

# File-based SQLite so every connection sees the same database
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
TEST_SECRET_KEY = "test-secret-key-for-testing-only-0123456789"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = TEST_SECRET_KEY

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from academy.config import get_settings

get_settings.cache_clear()

from academy.database import configure_sqlite
from academy.engines.training.catalog import CourseCatalog, CourseDefinition
from academy.engines.training.progression import ProgressionEngine
from academy.engines.training.quiz_scorer import QuizQuestion
from academy.engines.training.tiers import Tier
from academy.kernel.identity.jwt import JWTManager, StaffRole
from academy.kernel.models import Base, ContentType, Course

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected into the engine components."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_questions(count: int) -> List[QuizQuestion]:
    """count questions whose correct option is always index 0."""
    return [
        QuizQuestion(text=f"Question {i + 1}", options=["right", "wrong", "also wrong"], correct_index=0)
        for i in range(count)
    ]


def answers_with(correct: int, total: int) -> List[int]:
    """An answer sheet with the first `correct` answers right."""
    return [0] * correct + [1] * (total - correct)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine with a fresh schema."""
    engine = configure_sqlite(create_async_engine(
        f"sqlite+aiosqlite:///{TEST_DB_PATH}",
        echo=False,
        connect_args={"check_same_thread": False},
    ))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def staff_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def engine(db_session: AsyncSession, clock: FakeClock) -> ProgressionEngine:
    return ProgressionEngine(db_session, clock=clock)


@pytest.fixture
def add_course(db_session: AsyncSession):
    """Factory fixture: add a course to the catalog."""

    async def _add(
        tier: Tier,
        title: str = "Course",
        order_index: int = 0,
        questions: Optional[List[QuizQuestion]] = None,
        is_capstone: bool = False,
        pass_mark_percent: Optional[int] = None,
    ) -> Course:
        definition = CourseDefinition(
            tier=tier,
            title=title,
            order_index=order_index,
            content_type=ContentType.QUIZ if questions else ContentType.READING,
            questions=questions or [],
            is_capstone=is_capstone,
            pass_mark_percent=pass_mark_percent,
        )
        return await CourseCatalog(db_session).add_course(definition)

    return _add


@pytest_asyncio.fixture
async def standard_catalog(add_course):
    """
    Two reading courses per tier, plus:
    - L1: a 10-question quiz
    - L2: a 10-question quiz
    - L3: a capstone quiz
    """
    courses = {}
    courses["foundation"] = [
        await add_course(Tier.FOUNDATION, "Welcome", 0),
        await add_course(Tier.FOUNDATION, "Our Values", 1),
    ]
    courses["L1"] = [
        await add_course(Tier.L1, "Personal Hygiene", 0),
        await add_course(Tier.L1, "L1 Quiz", 1, questions=make_questions(10)),
    ]
    courses["L2"] = [
        await add_course(Tier.L2, "Cross Contamination", 0),
        await add_course(Tier.L2, "L2 Quiz", 1, questions=make_questions(10)),
    ]
    courses["L3"] = [
        await add_course(Tier.L3, "HACCP", 0),
        await add_course(Tier.L3, "L3 Capstone", 1, questions=make_questions(20), is_capstone=True),
    ]
    return courses


async def complete_tier(engine: ProgressionEngine, staff_id: uuid.UUID, courses: List[Course]):
    """Complete every course in a tier with full marks (reflecting on capstones)."""
    from academy.engines.training.reflection_gate import ReflectionSubmission

    result = None
    for course in courses:
        if course.is_quiz:
            total = len(course.quiz)
            result = await engine.submit_quiz(staff_id, course.id, answers_with(total, total))
            if course.is_capstone:
                result = await engine.submit_reflection(
                    staff_id,
                    course.id,
                    ReflectionSubmission(
                        what_learned="Temperature control",
                        connected_value="Respect & Clean Mindset",
                        proud_moment="Caught a fridge at 9C",
                    ),
                )
        else:
            result = await engine.complete_reading(staff_id, course.id)
    return result


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(secret_key=TEST_SECRET_KEY, algorithm="HS256")


def bearer(jwt_manager: JWTManager, staff_id: uuid.UUID, role: StaffRole = StaffRole.STAFF) -> dict:
    token, _, _ = jwt_manager.create_access_token(
        staff_id=staff_id,
        email=f"{staff_id.hex[:8]}@example.com",
        role=role.value,
        name="Test Staff",
    )
    return {"Authorization": f"Bearer {token}"}


def pytest_sessionfinish(session, exitstatus):
    try:
        if os.path.exists(TEST_DB_PATH):
            os.unlink(TEST_DB_PATH)
    except OSError:
        pass
