import os

# Point settings at a throwaway database before anything reads them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["AUTH_REQUIRED"] = "false"
os.environ["ENFORCE_EMAIL_DOMAINS"] = "true"

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import labmanager.models  # noqa: F401
from labmanager.database import Base, build_engine, build_sessionmaker, get_db
from labmanager.main import app
from labmanager.schemas.course import CourseCreate
from labmanager.schemas.lab_room import LabRoomCreate
from labmanager.schemas.schedule import ScheduleEntryCreate
from labmanager.schemas.user import UserCreate
from labmanager.services.course_service import course_service
from labmanager.services.lab_room_service import lab_room_service
from labmanager.services.schedule_service import schedule_service
from labmanager.services.user_service import user_service


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    sessionmaker = build_sessionmaker(engine)
    async with sessionmaker() as session:
        yield session


@pytest_asyncio.fixture
async def client(engine):
    sessionmaker = build_sessionmaker(engine)

    async def override_get_db():
        async with sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def factory(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "email": f"dosen{n}@lecturer.akbid.ac.id",
            "full_name": f"Instructor {n}",
            "role": "instructor",
            "nim_nip": f"1985000{n:05d}",
        }
        fields.update(overrides)
        return await user_service.create(UserCreate(**fields), db)

    return factory


@pytest.fixture
def make_lab_room(db):
    async def factory(code="LAB-001", **overrides):
        fields = {"code": code, "name": f"Practice room {code}", "capacity": 20, "location": "Building A"}
        fields.update(overrides)
        return await lab_room_service.create(LabRoomCreate(**fields), db)

    return factory


@pytest.fixture
def make_course(db):
    async def factory(code="KEB301", **overrides):
        fields = {"code": code, "name": f"Course {code}", "credits": 3, "semester": 3}
        fields.update(overrides)
        return await course_service.create(CourseCreate(**fields), db)

    return factory


@pytest.fixture
def make_entry(db):
    async def factory(course, room, start="09:00", end="11:00", **overrides):
        fields = {
            "course_id": course.id,
            "lab_room_id": room.id,
            "weekday": "senin",
            "date": date(2024, 3, 4),
            "start_time": start,
            "end_time": end,
            "topic": "Antenatal examination",
        }
        fields.update(overrides)
        return await schedule_service.create(ScheduleEntryCreate(**fields), db)

    return factory


@pytest_asyncio.fixture
async def booking_setup(make_user, make_lab_room, make_course):
    """An instructor teaching KEB301 in LAB-001."""
    instructor = await make_user(full_name="Dr. Sari")
    room = await make_lab_room("LAB-001")
    course = await make_course("KEB301", name="Antenatal Care Practice", instructor_id=instructor.id, lab_room_id=room.id)
    return {"instructor": instructor, "room": room, "course": course}
