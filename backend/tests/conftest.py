"""
Test Planner - Test Configuration
Pytest fixtures and configuration for testing
"""
import os

# Point the application at SQLite before app modules build their engine
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///./test.db")

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core.database import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models import Question, Subject, Subtopic, Topic, User, UserRole


# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "TestPass123!"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Sample user registration data."""
    return {
        "email": "test@example.com",
        "password": TEST_PASSWORD,
        "first_name": "Test",
        "last_name": "User",
    }


# ============================================================================
# Users
# ============================================================================

async def make_user(db: AsyncSession, email: str, role: UserRole) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        first_name=role.value.title(),
        last_name="Example",
        role=role.value,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(subject=user.id, additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def student(db_session: AsyncSession) -> User:
    return await make_user(db_session, "student@example.com", UserRole.STUDENT)


@pytest_asyncio.fixture
async def other_student(db_session: AsyncSession) -> User:
    return await make_user(db_session, "other.student@example.com", UserRole.STUDENT)


@pytest_asyncio.fixture
async def teacher(db_session: AsyncSession) -> User:
    return await make_user(db_session, "teacher@example.com", UserRole.TEACHER)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin@example.com", UserRole.ADMIN)


# ============================================================================
# Curriculum & question bank
# ============================================================================

@pytest_asyncio.fixture
async def curriculum(db_session: AsyncSession) -> dict[str, Any]:
    """One subject with two topics, each holding one subtopic."""
    subject = Subject(name="Mathematics", slug="mathematics")
    db_session.add(subject)
    await db_session.flush()

    topics = []
    subtopics = []
    for index, name in enumerate(["Addition", "Fractions"], start=1):
        topic = Topic(subject_id=subject.id, name=name, slug=name.lower(), display_order=index)
        db_session.add(topic)
        await db_session.flush()
        subtopic = Subtopic(topic_id=topic.id, name=f"{name} basics", slug=f"{name.lower()}-basics")
        db_session.add(subtopic)
        await db_session.flush()
        topics.append(topic)
        subtopics.append(subtopic)

    return {"subject": subject, "topics": topics, "subtopics": subtopics}


@pytest_asyncio.fixture
async def question_bank(
    db_session: AsyncSession,
    curriculum: dict[str, Any],
    teacher: User,
) -> list[Question]:
    """
    Four questions per difficulty level 1..3 in every subtopic.

    Even-numbered questions flag the correct option; odd-numbered ones use
    plain string options with ``correct_answer``.
    """
    questions = []
    for subtopic in curriculum["subtopics"]:
        for difficulty in (1, 2, 3):
            for number in range(4):
                answer = str(difficulty * 10 + number)
                if number % 2 == 0:
                    options = [
                        {"option_text": answer, "is_correct": True},
                        {"option_text": "wrong", "is_correct": False},
                    ]
                    correct_answer = None
                else:
                    options = [answer, "wrong"]
                    correct_answer = answer
                question = Question(
                    subtopic_id=subtopic.id,
                    created_by=teacher.id,
                    question_text=f"{subtopic.name} question {difficulty}.{number}",
                    options=options,
                    correct_answer=correct_answer,
                    difficulty_level=difficulty,
                )
                db_session.add(question)
                questions.append(question)
    await db_session.flush()
    return questions


def answer_for(question: dict[str, Any]) -> str:
    """The correct answer of a snapshot question."""
    for option in question["options"]:
        if isinstance(option, dict) and option.get("is_correct"):
            return option["option_text"]
    return question["correct_answer"]


@pytest.fixture
def headers_for():
    """Factory for bearer headers of a given user."""
    return auth_headers


@pytest.fixture
def correct_answer_for():
    return answer_for


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Independent sessions over the same test schema."""
    return test_session_maker
