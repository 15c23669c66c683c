import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.constants import CANCELLED, SCHEDULED, SCHEDULE_STATUSES, SCHEDULE_TRANSITIONS
from labmanager.exceptions import (
    InvalidStatusTransitionError,
    NotFoundError,
    RoomConflictError,
    StoreError,
    ValidationError,
)
from labmanager.models.course import Course
from labmanager.models.lab_room import LabRoom
from labmanager.models.schedule_entry import ScheduleEntry
from labmanager.models.user import User
from labmanager.services.availability import check_availability
from labmanager.services.base import EntityService, ilike_any, store_operation

logger = logging.getLogger(__name__)

SLOT_FIELDS = ("lab_room_id", "weekday", "date", "start_time", "end_time")


class ScheduleService(EntityService):
    model = ScheduleEntry
    entity_name = "ScheduleEntry"
    references = {"course_id": Course, "instructor_id": User, "lab_room_id": LabRoom}
    default_status = SCHEDULED

    def _ordering(self) -> tuple:
        return (ScheduleEntry.date, ScheduleEntry.start_time, ScheduleEntry.id)

    def _apply_filters(self, query, filters: dict):
        if filters.get("search"):
            query = query.where(ilike_any([ScheduleEntry.topic], filters["search"]))
        for key in ("course_id", "lab_room_id", "instructor_id", "weekday", "status"):
            if filters.get(key):
                query = query.where(getattr(ScheduleEntry, key) == filters[key])
        if filters.get("date_from"):
            query = query.where(ScheduleEntry.date >= filters["date_from"])
        if filters.get("date_to"):
            query = query.where(ScheduleEntry.date <= filters["date_to"])
        return query

    async def _ensure_available(self, slot: dict, db: AsyncSession, exclude_id: Optional[int] = None) -> None:
        availability = await check_availability(
            slot["lab_room_id"],
            slot["weekday"],
            slot["date"],
            slot["start_time"],
            slot["end_time"],
            db,
            exclude_entry_id=exclude_id,
        )
        if not availability["available"]:
            logger.warning(
                "Room %s busy on %s %s-%s: %d conflict(s)",
                slot["lab_room_id"],
                slot["date"],
                slot["start_time"],
                slot["end_time"],
                len(availability["conflicts"]),
            )
            raise RoomConflictError(availability["conflicts"])

    async def _recheck_after_write(self, entry: ScheduleEntry, db: AsyncSession) -> None:
        """Catch a booking committed by someone else between our check and our write."""
        slot = {f: getattr(entry, f) for f in SLOT_FIELDS}
        try:
            await self._ensure_available(slot, db, exclude_id=entry.id)
        except RoomConflictError:
            await db.rollback()
            raise

    async def create(self, data, db: AsyncSession, acting_user_id: Optional[int] = None) -> ScheduleEntry:
        values = self._dump(data, exclude_unset=False)
        status = values.get("status") or SCHEDULED
        if status != SCHEDULED:
            raise InvalidStatusTransitionError("new", status)
        values["status"] = status

        try:
            course = await db.get(Course, values["course_id"])
            if course is None:
                raise NotFoundError("Course", values["course_id"])
            if values.get("instructor_id") is None:
                values["instructor_id"] = course.instructor_id or acting_user_id
            if values["instructor_id"] is None:
                raise ValidationError({"instructor_id": "Instructor is required"})
            await self._check_references(values, db)

            await self._ensure_available(values, db)
            entry = ScheduleEntry(**values)
            db.add(entry)
            await self._flush(entry, values, db)
            await self._recheck_after_write(entry, db)
        except SQLAlchemyError as e:
            logger.exception("Store failure while creating schedule entry")
            raise StoreError(f"Failed to create schedule entry: {e}") from e

        logger.info(
            "Created schedule entry %s: room %s %s %s-%s",
            entry.id,
            entry.lab_room_id,
            entry.date,
            entry.start_time,
            entry.end_time,
        )
        return entry

    async def update(self, entry_id: int, data, db: AsyncSession) -> ScheduleEntry:
        values = self._dump(data, exclude_unset=True)
        values.pop("id", None)

        try:
            entry = await self.get_or_raise(entry_id, db)

            new_status = values.get("status", entry.status)
            if new_status != entry.status and new_status not in SCHEDULE_TRANSITIONS.get(entry.status, ()):
                logger.warning("Rejected status change %s -> %s for entry %s", entry.status, new_status, entry_id)
                raise InvalidStatusTransitionError(entry.status, new_status)

            await self._check_references(values, db)

            slot_touched = any(f in values for f in SLOT_FIELDS)
            if slot_touched:
                slot = {f: values.get(f, getattr(entry, f)) for f in SLOT_FIELDS}
                if slot["start_time"] >= slot["end_time"]:
                    raise ValidationError({"end_time": "End time must be after start time"})
                # A cancelled entry no longer occupies the room
                if new_status != CANCELLED:
                    await self._ensure_available(slot, db, exclude_id=entry_id)

            for key, value in values.items():
                setattr(entry, key, value)
            await self._flush(entry, values, db)
            if slot_touched and new_status != CANCELLED:
                await self._recheck_after_write(entry, db)
        except SQLAlchemyError as e:
            logger.exception("Store failure while updating schedule entry %s", entry_id)
            raise StoreError(f"Failed to update schedule entry: {e}") from e

        logger.info("Updated schedule entry %s (status %s)", entry.id, entry.status)
        return entry

    # delete() is inherited: no dependents yet. Attendance records will block it once they exist.

    @store_operation("fetch schedule statistics")
    async def stats(self, db: AsyncSession, instructor_id: Optional[int] = None) -> dict:
        query = select(ScheduleEntry.status)
        if instructor_id is not None:
            query = query.where(ScheduleEntry.instructor_id == instructor_id)
        result = await db.execute(query)
        statuses = result.scalars().all()
        stats = {status: 0 for status in SCHEDULE_STATUSES}
        for status in statuses:
            stats[status] = stats.get(status, 0) + 1
        stats["total"] = len(statuses)
        return stats


schedule_service = ScheduleService()
