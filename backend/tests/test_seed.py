import pytest

from labmanager.seed import DEMO_LAB_ROOMS, DEMO_USERS, seed_demo_data
from labmanager.services.course_service import course_service
from labmanager.services.lab_room_service import lab_room_service
from labmanager.services.user_service import user_service
from labmanager.validation import validate_lab_room, validate_user


@pytest.mark.parametrize("user", DEMO_USERS, ids=lambda u: u["role"])
def test_demo_users_are_valid(user):
    assert validate_user(user) == {}


@pytest.mark.parametrize("room", DEMO_LAB_ROOMS, ids=lambda r: r["code"])
def test_demo_rooms_are_valid(room):
    assert validate_lab_room(room) == {}


async def test_seed_is_idempotent(db):
    await seed_demo_data(db)
    await seed_demo_data(db)
    assert (await user_service.stats(db))["total"] == len(DEMO_USERS)
    assert (await lab_room_service.stats(db))["total"] == len(DEMO_LAB_ROOMS)
    courses = await course_service.list({}, 1, 10, db)
    assert [c.code for c in courses.items] == ["ANT101", "KEB301"]
    assert all(c.instructor_id is not None for c in courses.items)
