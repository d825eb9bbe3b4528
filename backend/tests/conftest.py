"""Test configuration and fixtures.

Three layers:
    1. Scoring engine - pure functions, no fixtures needed
    2. Services - real repositories against an in-memory SQLite database
    3. Routers - httpx.AsyncClient + FastAPI dependency_overrides
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_current_user, get_db
from app.main import app
from app.models import (
    Application,
    AssessmentSection,
    AssessmentTemplate,
    Base,
    Company,
    Question,
    QuestionOption,
    User,
    UserCompanyAccess,
)
from tests.fixtures import make_user

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Catalog used across the suite:
#   section 1 "Governança": Q1 (opts 11=80, 12=20), Q2 (opts 21=60, 22=100)
#   section 2 "Dados":      Q3 (opts 31=40, 32=no score)
#   no section:             Q4 (opt 41=10)
CATALOG = {
    "sections": [
        {
            "id": 1,
            "title": "Governança",
            "questions": [
                {
                    "id": 1,
                    "text": "Existe uma política de uso de IA?",
                    "order_index": 1,
                    "options": [
                        {"id": 11, "text": "Sim, formalizada", "score_value": 80},
                        {"id": 12, "text": "Não", "score_value": 20},
                    ],
                },
                {
                    "id": 2,
                    "text": "Há um responsável pela governança de IA?",
                    "order_index": 2,
                    "options": [
                        {"id": 21, "text": "Parcialmente", "score_value": 60},
                        {"id": 22, "text": "Sim", "score_value": 100},
                    ],
                },
            ],
        },
        {
            "id": 2,
            "title": "Dados",
            "questions": [
                {
                    "id": 3,
                    "text": "Os dados de treino são catalogados?",
                    "order_index": 3,
                    "options": [
                        {"id": 31, "text": "Em parte", "score_value": 40},
                        {"id": 32, "text": "Não sei", "score_value": None},
                    ],
                },
            ],
        },
    ],
    "questions": [
        {
            "id": 4,
            "text": "A aplicação registra decisões automatizadas?",
            "order_index": 4,
            "options": [{"id": 41, "text": "Raramente", "score_value": 10}],
        },
    ],
}


# ── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture
async def async_engine():
    """In-memory SQLite engine; one shared connection keeps the database alive."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def catalog(db_session):
    """Seed the question catalog and an active template."""
    db_session.add_all(
        [
            AssessmentTemplate(id=1, name="Questionário IA", version_number=1, is_active=True),
            AssessmentTemplate(id=2, name="Questionário IA", version_number=2, is_active=True),
            AssessmentTemplate(id=3, name="Rascunho", version_number=3, is_active=False),
        ]
    )
    for section in CATALOG["sections"]:
        db_session.add(AssessmentSection(id=section["id"], title=section["title"]))
    await db_session.flush()

    def add_question(data, section_id):
        db_session.add(
            Question(
                id=data["id"],
                text=data["text"],
                order_index=data["order_index"],
                section_id=section_id,
            )
        )

    for section in CATALOG["sections"]:
        for question in section["questions"]:
            add_question(question, section["id"])
    for question in CATALOG["questions"]:
        add_question(question, None)
    await db_session.flush()

    for section in CATALOG["sections"]:
        for question in section["questions"]:
            for option in question["options"]:
                db_session.add(QuestionOption(question_id=question["id"], **option))
    for question in CATALOG["questions"]:
        for option in question["options"]:
            db_session.add(QuestionOption(question_id=question["id"], **option))

    await db_session.commit()
    return CATALOG


@pytest.fixture
def user() -> User:
    return make_user()


@pytest.fixture
async def company(db_session, user):
    """Company with one application; ``user`` holds the EDITOR role."""
    company = Company(name="Acme Ltda", document="12345678000199")
    db_session.add(company)
    await db_session.flush()

    db_session.add(UserCompanyAccess(user_id=user.id, company_id=company.id, role="EDITOR"))
    await db_session.commit()
    return company


@pytest.fixture
async def application(db_session, company):
    application = Application(company_id=company.id, name="Motor de crédito")
    db_session.add(application)
    await db_session.commit()
    return application


# ── HTTP (httpx.AsyncClient + dependency_overrides) ──────────────────────────

@pytest.fixture
async def client(db_session, user):
    """Authenticated client backed by the test database session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client(db_session):
    """Client without an identity override; requests go through token validation."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
