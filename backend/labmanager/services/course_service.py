import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.constants import ROLE_INSTRUCTOR, STATUS_ACTIVE, STATUS_INACTIVE
from labmanager.exceptions import NotFoundError, ValidationError
from labmanager.models.course import Course
from labmanager.models.lab_room import LabRoom
from labmanager.models.schedule_entry import ScheduleEntry
from labmanager.models.user import User
from labmanager.services.base import EntityService, ilike_any, store_operation

logger = logging.getLogger(__name__)


class CourseService(EntityService):
    model = Course
    entity_name = "Course"
    natural_keys = ("code",)
    references = {"instructor_id": User, "lab_room_id": LabRoom}
    dependents = ((ScheduleEntry, "course_id", "schedule entries"),)

    def _ordering(self) -> tuple:
        return (Course.semester, Course.code)

    def _apply_filters(self, query, filters: dict):
        if filters.get("search"):
            query = query.where(ilike_any([Course.code, Course.name], filters["search"]))
        if filters.get("status"):
            query = query.where(Course.status == filters["status"])
        if filters.get("semester"):
            query = query.where(Course.semester == filters["semester"])
        if filters.get("instructor_id"):
            query = query.where(Course.instructor_id == filters["instructor_id"])
        if filters.get("lab_room_id"):
            query = query.where(Course.lab_room_id == filters["lab_room_id"])
        return query

    @store_operation("fetch courses for instructor")
    async def list_for_instructor(self, instructor_id: int, db: AsyncSession) -> list[Course]:
        result = await db.execute(
            select(Course)
            .where(Course.instructor_id == instructor_id, Course.status == STATUS_ACTIVE)
            .order_by(Course.semester, Course.code)
        )
        return list(result.scalars().all())

    @store_operation("fetch course options")
    async def options(self, db: AsyncSession) -> list[Course]:
        result = await db.execute(select(Course).where(Course.status == STATUS_ACTIVE).order_by(Course.code))
        return list(result.scalars().all())

    @store_operation("assign instructor")
    async def assign_instructor(self, course_id: int, instructor_id: int, db: AsyncSession) -> Course:
        instructor = await db.get(User, instructor_id)
        if instructor is None:
            raise NotFoundError("User", instructor_id)
        if instructor.role != ROLE_INSTRUCTOR:
            raise ValidationError({"instructor_id": "Assigned user must have the instructor role"})
        return await self.update(course_id, {"instructor_id": instructor_id}, db)

    @store_operation("fetch course statistics")
    async def stats(self, db: AsyncSession) -> dict:
        result = await db.execute(select(Course.status, Course.semester, Course.credits))
        rows = result.all()
        by_semester: dict[int, int] = {}
        for _, semester, _ in rows:
            if semester:
                by_semester[semester] = by_semester.get(semester, 0) + 1
        return {
            "total": len(rows),
            "active": sum(1 for status, _, _ in rows if status == STATUS_ACTIVE),
            "inactive": sum(1 for status, _, _ in rows if status == STATUS_INACTIVE),
            "total_credits": sum(credits or 0 for _, _, credits in rows),
            "by_semester": dict(sorted(by_semester.items())),
        }


course_service = CourseService()
