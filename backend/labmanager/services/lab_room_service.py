import logging
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.constants import STATUS_ACTIVE, STATUS_INACTIVE
from labmanager.models.course import Course
from labmanager.models.lab_room import LabRoom
from labmanager.models.schedule_entry import ScheduleEntry
from labmanager.models.user import User
from labmanager.services.base import EntityService, Page, ilike_any, store_operation

logger = logging.getLogger(__name__)


class LabRoomService(EntityService):
    model = LabRoom
    entity_name = "LabRoom"
    natural_keys = ("code",)
    references = {"pic_id": User}
    dependents = (
        (Course, "lab_room_id", "courses"),
        (ScheduleEntry, "lab_room_id", "schedule entries"),
    )

    def _ordering(self) -> tuple:
        return (LabRoom.code,)

    def _apply_filters(self, query, filters: dict):
        if filters.get("search"):
            query = query.where(ilike_any([LabRoom.code, LabRoom.name, LabRoom.location], filters["search"]))
        if filters.get("status"):
            query = query.where(LabRoom.status == filters["status"])
        if filters.get("location"):
            query = query.where(LabRoom.location == filters["location"])
        return query

    async def _attach_course_counts(self, rooms: list, db: AsyncSession) -> None:
        if not rooms:
            return
        result = await db.execute(
            select(Course.lab_room_id, func.count(Course.id))
            .where(Course.lab_room_id.in_([r.id for r in rooms]))
            .group_by(Course.lab_room_id)
        )
        counts = dict(result.all())
        for room in rooms:
            room.course_count = counts.get(room.id, 0)

    @store_operation("fetch lab room options")
    async def options(self, db: AsyncSession) -> list[LabRoom]:
        result = await db.execute(
            select(LabRoom).where(LabRoom.status == STATUS_ACTIVE).order_by(LabRoom.code)
        )
        return list(result.scalars().all())

    @store_operation("fetch lab room statistics")
    async def stats(self, db: AsyncSession) -> dict:
        result = await db.execute(select(LabRoom.status, LabRoom.capacity))
        rows = result.all()
        return {
            "total": len(rows),
            "active": sum(1 for status, _ in rows if status == STATUS_ACTIVE),
            "inactive": sum(1 for status, _ in rows if status == STATUS_INACTIVE),
            "total_capacity": sum(capacity or 0 for _, capacity in rows),
        }

    @store_operation("fetch lab room list")
    async def list(self, filters: Optional[dict], page: int, page_size: int, db: AsyncSession) -> Page:
        page_ = await self._list(filters or {}, page, page_size, db)
        await self._attach_course_counts(page_.items, db)
        return page_

    @store_operation("fetch lab room")
    async def get_by_id(self, entity_id: int, db: AsyncSession):
        room = await super().get_by_id(entity_id, db)
        if room is not None:
            await self._attach_course_counts([room], db)
        return room


lab_room_service = LabRoomService()
