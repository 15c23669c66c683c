"""Idempotent demo data: one user per role, two lab rooms, two courses."""

import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.models.course import Course
from labmanager.models.lab_room import LabRoom
from labmanager.models.user import User

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"email": "admin@akbid.ac.id", "full_name": "Admin", "role": "admin"},
    {"email": "dosen@lecturer.akbid.ac.id", "full_name": "Dr. Sari Wulandari", "role": "instructor", "nim_nip": "198501012010"},
    {"email": "laboran@staff.akbid.ac.id", "full_name": "Budi Santoso", "role": "lab_technician", "nim_nip": "LAB-0001"},
    {"email": "mahasiswa@student.akbid.ac.id", "full_name": "Rina Putri", "role": "student", "nim_nip": "2021000001"},
]

DEMO_LAB_ROOMS = [
    {"code": "LAB-001", "name": "Midwifery Skills Lab", "capacity": 20, "location": "Building A, 2nd floor",
     "facilities": ["Birthing simulator", "Examination beds"]},
    {"code": "LAB-002", "name": "Anatomy Lab", "capacity": 30, "location": "Building B, 1st floor",
     "facilities": ["Anatomical models"]},
]

DEMO_COURSES = [
    {"code": "KEB301", "name": "Antenatal Care Practice", "credits": 3, "semester": 3, "lab_room": "LAB-001",
     "learning_outcomes": ["Perform a complete antenatal examination"]},
    {"code": "ANT101", "name": "Human Anatomy", "credits": 2, "semester": 1, "lab_room": "LAB-002",
     "learning_outcomes": []},
]


async def seed_demo_data(db: AsyncSession) -> None:
    created = 0
    users = {}
    for u in DEMO_USERS:
        user = await db.scalar(select(User).where(User.email == u["email"]))
        if not user:
            user = User(status="active", **u)
            db.add(user)
            created += 1
        users[u["role"]] = user
    await db.flush()

    rooms = {}
    for r in DEMO_LAB_ROOMS:
        room = await db.scalar(select(LabRoom).where(LabRoom.code == r["code"]))
        if not room:
            room = LabRoom(status="active", pic_id=users["lab_technician"].id, **r)
            db.add(room)
            created += 1
        rooms[r["code"]] = room
    await db.flush()

    for c in DEMO_COURSES:
        fields = {k: v for k, v in c.items() if k != "lab_room"}
        if not await db.scalar(select(Course.id).where(Course.code == c["code"])):
            db.add(Course(
                status="active",
                lab_room_id=rooms[c["lab_room"]].id,
                instructor_id=users["instructor"].id,
                **fields,
            ))
            created += 1
    await db.commit()
    logger.info("Demo data seeded (%d new rows)", created)
