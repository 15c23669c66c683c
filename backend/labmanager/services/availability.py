"""
Lab room availability.

Bookings are half-open intervals ``[start, end)`` of zero-padded "HH:MM"
strings on one calendar day, so plain string comparison orders them and a
booking ending at 09:00 does not collide with one starting at 09:00.
"""

import logging
from datetime import date
from typing import Iterable, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.constants import CANCELLED
from labmanager.exceptions import StoreError
from labmanager.models.schedule_entry import ScheduleEntry

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def overlaps(start: str, end: str, other_start: str, other_end: str) -> bool:
    return start < other_end and end > other_start


def describe_conflict(entry) -> dict:
    return {
        "id": entry.id,
        "course": entry.course.name if entry.course is not None else UNKNOWN,
        "instructor": entry.instructor.full_name if entry.instructor is not None else UNKNOWN,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
    }


def find_conflicts(start: str, end: str, entries: Iterable) -> list:
    """Entries whose time range overlaps ``[start, end)``, in input order."""
    return [e for e in entries if overlaps(start, end, e.start_time, e.end_time)]


async def check_availability(
    lab_room_id: int,
    weekday: str,
    on_date: date,
    start: str,
    end: str,
    db: AsyncSession,
    exclude_entry_id: Optional[int] = None,
) -> dict:
    query = select(ScheduleEntry).where(
        ScheduleEntry.lab_room_id == lab_room_id,
        ScheduleEntry.weekday == weekday,
        ScheduleEntry.date == on_date,
        ScheduleEntry.status != CANCELLED,
    )
    if exclude_entry_id is not None:
        query = query.where(ScheduleEntry.id != exclude_entry_id)

    try:
        result = await db.execute(query.order_by(ScheduleEntry.start_time, ScheduleEntry.id))
    except SQLAlchemyError as e:
        logger.exception("Store failure while checking room %s availability", lab_room_id)
        raise StoreError(f"Failed to check room availability: {e}") from e
    existing = result.scalars().all()

    conflicts = [describe_conflict(e) for e in find_conflicts(start, end, existing)]
    return {"available": not conflicts, "conflicts": conflicts}
