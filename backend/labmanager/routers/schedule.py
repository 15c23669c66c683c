from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.config import get_settings
from labmanager.database import get_db
from labmanager.auth import require_permission, UserPrincipal
from labmanager.exceptions import PermissionDeniedError, ValidationError
from labmanager.rbac.permissions import PermissionChecker, get_permission_checker
from labmanager.schemas.schedule import (
    AvailabilityRequest,
    AvailabilityResponse,
    ScheduleEntryCreate,
    ScheduleEntryUpdate,
    ScheduleEntryResponse,
    ScheduleEntryListResponse,
    ScheduleStats,
)
from labmanager.services.availability import check_availability
from labmanager.services.schedule_service import schedule_service
from labmanager.validation import validate_availability, validate_schedule_entry

router = APIRouter()
settings = get_settings()

can_view = require_permission("schedule.view")
can_write = require_permission("schedule.manage", "schedule.own", any_of=True)


def _ensure_owner(instructor_id: Optional[int], user: UserPrincipal, checker: PermissionChecker) -> None:
    """Holders of schedule.own may only touch their own sessions."""
    if checker.has_permission(user.role, "schedule.manage"):
        return
    if user.user_id is None or instructor_id != user.user_id:
        raise PermissionDeniedError(user.role, ["schedule.manage"])


@router.get("", response_model=ScheduleEntryListResponse)
async def list_schedule_entries(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str = Query("", description="Search by topic"),
    course_id: Optional[int] = Query(None),
    lab_room_id: Optional[int] = Query(None),
    instructor_id: Optional[int] = Query(None),
    weekday: str = Query(""),
    status: str = Query(""),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_view),
):
    filters = {
        "search": search,
        "course_id": course_id,
        "lab_room_id": lab_room_id,
        "instructor_id": instructor_id,
        "weekday": weekday,
        "status": status,
        "date_from": date_from,
        "date_to": date_to,
    }
    result = await schedule_service.list(filters, page, page_size, db)
    return ScheduleEntryListResponse(
        items=[ScheduleEntryResponse.model_validate(e) for e in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.post("/availability", response_model=AvailabilityResponse)
async def check_room_availability(
    data: AvailabilityRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_view),
):
    errors = validate_availability(data.model_dump())
    if errors:
        raise ValidationError(errors)
    result = await check_availability(
        data.lab_room_id,
        data.weekday,
        data.date,
        data.start_time,
        data.end_time,
        db,
        exclude_entry_id=data.exclude_entry_id,
    )
    return AvailabilityResponse(**result)


@router.get("/stats", response_model=ScheduleStats)
async def schedule_stats(
    instructor_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_view),
):
    return ScheduleStats(**await schedule_service.stats(db, instructor_id=instructor_id))


@router.get("/{entry_id}", response_model=ScheduleEntryResponse)
async def get_schedule_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_view),
):
    entry = await schedule_service.get_by_id(entry_id, db)
    if not entry:
        raise HTTPException(status_code=404, detail=f"Schedule entry {entry_id} not found")
    return ScheduleEntryResponse.model_validate(entry)


@router.post("", response_model=ScheduleEntryResponse, status_code=201)
async def create_schedule_entry(
    data: ScheduleEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_write),
    checker: PermissionChecker = Depends(get_permission_checker),
):
    errors = validate_schedule_entry(data.model_dump())
    if errors:
        raise ValidationError(errors)
    if not checker.has_permission(current_user.role, "schedule.manage"):
        if data.instructor_id is None:
            data.instructor_id = current_user.user_id
        _ensure_owner(data.instructor_id, current_user, checker)
    entry = await schedule_service.create(data, db, acting_user_id=current_user.user_id)
    return ScheduleEntryResponse.model_validate(entry)


@router.patch("/{entry_id}", response_model=ScheduleEntryResponse)
async def update_schedule_entry(
    entry_id: int,
    data: ScheduleEntryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_write),
    checker: PermissionChecker = Depends(get_permission_checker),
):
    errors = validate_schedule_entry(data.model_dump(exclude_unset=True), partial=True)
    if errors:
        raise ValidationError(errors)
    existing = await schedule_service.get_or_raise(entry_id, db)
    _ensure_owner(existing.instructor_id, current_user, checker)
    if "instructor_id" in data.model_fields_set:
        _ensure_owner(data.instructor_id, current_user, checker)
    entry = await schedule_service.update(entry_id, data, db)
    return ScheduleEntryResponse.model_validate(entry)


@router.delete("/{entry_id}")
async def delete_schedule_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(can_write),
    checker: PermissionChecker = Depends(get_permission_checker),
):
    existing = await schedule_service.get_or_raise(entry_id, db)
    _ensure_owner(existing.instructor_id, current_user, checker)
    await schedule_service.delete(entry_id, db)
    return {"deleted": True, "id": entry_id}
