import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.constants import ROLES, ROLE_INSTRUCTOR, STATUSES, STATUS_ACTIVE
from labmanager.models.lab_room import LabRoom
from labmanager.models.schedule_entry import ScheduleEntry
from labmanager.models.user import User
from labmanager.services.base import EntityService, ilike_any, store_operation

logger = logging.getLogger(__name__)


class UserService(EntityService):
    model = User
    entity_name = "User"
    natural_keys = ("email", "nim_nip")
    references = {"lab_room_id": LabRoom}
    dependents = ((ScheduleEntry, "instructor_id", "schedule entries"),)

    def _ordering(self) -> tuple:
        return (User.email,)

    def _apply_filters(self, query, filters: dict):
        if filters.get("search"):
            query = query.where(ilike_any([User.full_name, User.email, User.nim_nip], filters["search"]))
        if filters.get("role"):
            query = query.where(User.role == filters["role"])
        if filters.get("status"):
            query = query.where(User.status == filters["status"])
        if filters.get("lab_room_id"):
            query = query.where(User.lab_room_id == filters["lab_room_id"])
        return query

    @store_operation("fetch instructors")
    async def list_instructors(self, db: AsyncSession) -> list[User]:
        """Active instructors, for course and schedule assignment."""
        result = await db.execute(
            select(User)
            .where(User.role == ROLE_INSTRUCTOR, User.status == STATUS_ACTIVE)
            .order_by(User.full_name)
        )
        return list(result.scalars().all())

    @store_operation("fetch active user by email")
    async def get_active_by_email(self, email: str, db: AsyncSession):
        result = await db.execute(select(User).where(User.email == email, User.status == STATUS_ACTIVE))
        return result.scalar_one_or_none()

    @store_operation("fetch user statistics")
    async def stats(self, db: AsyncSession) -> dict:
        result = await db.execute(select(User.role, User.status, func.count(User.id)).group_by(User.role, User.status))
        by_role = {role: 0 for role in ROLES}
        by_status = {status: 0 for status in STATUSES}
        total = 0
        for role, status, count in result.all():
            by_role[role] = by_role.get(role, 0) + count
            by_status[status] = by_status.get(status, 0) + count
            total += count
        return {"total": total, "by_role": by_role, "by_status": by_status}


user_service = UserService()
