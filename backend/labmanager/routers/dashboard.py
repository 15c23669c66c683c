from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.database import get_db
from labmanager.auth import require_permission, UserPrincipal
from labmanager.constants import ROLE_INSTRUCTOR
from labmanager.services.course_service import course_service
from labmanager.services.lab_room_service import lab_room_service
from labmanager.services.schedule_service import schedule_service
from labmanager.services.user_service import user_service

router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("schedule.view")),
):
    # Instructors see their own schedule figures
    instructor_id = current_user.user_id if current_user.role == ROLE_INSTRUCTOR else None
    return {
        "users": await user_service.stats(db),
        "lab_rooms": await lab_room_service.stats(db),
        "courses": await course_service.stats(db),
        "schedule": await schedule_service.stats(db, instructor_id=instructor_id),
    }
