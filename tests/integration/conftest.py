"""
Integration fixtures: app client on a file-based SQLite database.
"""

import os
import tempfile
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Use file-based SQLite so all connections share the same DB
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
from lessoncore.config import get_settings
get_settings.cache_clear()

from lessoncore.database import build_engine, build_session_maker, get_db
from lessoncore.kernel.models import Base, Lesson, LessonCheckpoint, Module, Realm
from lessoncore.main import app
from tests.integration.seed import GRADING, INTERACTIVITY, POOL


TEST_ENGINE = build_engine(f"sqlite+aiosqlite:///{TEST_DB_PATH}")
TEST_SESSION_MAKER = build_session_maker(TEST_ENGINE)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TEST_SESSION_MAKER() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@dataclass
class Curriculum:
    """Seeded realm with two modules, m1 = [l1, l2] and m2 = [l3], plus a
    standalone lesson whose validators carry no weight."""

    realm_id: uuid.UUID
    m1_id: uuid.UUID
    m2_id: uuid.UUID
    l1_id: uuid.UUID
    l2_id: uuid.UUID
    l3_id: uuid.UUID
    broken_lesson_id: uuid.UUID


@pytest_asyncio.fixture
async def client():
    """Async client with the test DB."""
    async with TEST_ENGINE.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def curriculum(client) -> Curriculum:
    realm = Realm(title="Python", order_index=0, published=True)
    m1 = Module(realm=realm, title="Basics", order_index=0, published=True)
    m2 = Module(realm=realm, title="Loops", order_index=1, published=True)
    drafts = Module(title="Drafts", order_index=0, published=False)
    lessons = [
        Lesson(module=m1, title="Print", order_index=0, published=True,
               interactivity_json=INTERACTIVITY, grading_json=GRADING),
        Lesson(module=m1, title="Print again", order_index=1, published=True,
               interactivity_json=INTERACTIVITY, grading_json=GRADING),
        Lesson(module=m2, title="For", order_index=0, published=True,
               interactivity_json=INTERACTIVITY, grading_json=GRADING),
        Lesson(module=drafts, title="Broken", order_index=0, published=True,
               interactivity_json=INTERACTIVITY,
               grading_json={**GRADING, "validators": [
                   {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 0},
               ]}),
    ]
    async with TEST_SESSION_MAKER() as session:
        session.add_all([realm, m1, m2, drafts, *lessons])
        await session.flush()
        session.add(LessonCheckpoint(lesson_id=lessons[0].id, module_id=m1.id,
                                     question_pool=POOL, published=True))
        await session.commit()

    return Curriculum(
        realm_id=realm.id,
        m1_id=m1.id,
        m2_id=m2.id,
        l1_id=lessons[0].id,
        l2_id=lessons[1].id,
        l3_id=lessons[2].id,
        broken_lesson_id=lessons[3].id,
    )


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TEST_SESSION_MAKER() as session:
        yield session
