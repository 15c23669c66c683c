from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.config import get_settings
from labmanager.database import get_db
from labmanager.auth import require_permission, UserPrincipal
from labmanager.exceptions import ValidationError
from labmanager.schemas.lab_room import (
    LabRoomCreate,
    LabRoomUpdate,
    LabRoomResponse,
    LabRoomListResponse,
    LabRoomOption,
    LabRoomStats,
)
from labmanager.services.lab_room_service import lab_room_service
from labmanager.validation import validate_lab_room

router = APIRouter()
settings = get_settings()


@router.get("", response_model=LabRoomListResponse)
async def list_lab_rooms(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str = Query("", description="Search by code, name, or location"),
    status: str = Query(""),
    location: str = Query(""),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.view")),
):
    filters = {"search": search, "status": status, "location": location}
    result = await lab_room_service.list(filters, page, page_size, db)
    return LabRoomListResponse(
        items=[LabRoomResponse.model_validate(r) for r in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/options", response_model=list[LabRoomOption])
async def lab_room_options(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.view")),
):
    rooms = await lab_room_service.options(db)
    return [LabRoomOption.model_validate(r) for r in rooms]


@router.get("/stats", response_model=LabRoomStats)
async def lab_room_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.view")),
):
    return LabRoomStats(**await lab_room_service.stats(db))


@router.get("/{lab_room_id}", response_model=LabRoomResponse)
async def get_lab_room(
    lab_room_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.view")),
):
    room = await lab_room_service.get_by_id(lab_room_id, db)
    if not room:
        raise HTTPException(status_code=404, detail=f"Lab room {lab_room_id} not found")
    return LabRoomResponse.model_validate(room)


@router.post("", response_model=LabRoomResponse, status_code=201)
async def create_lab_room(
    data: LabRoomCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.manage")),
):
    errors = validate_lab_room(data.model_dump())
    if errors:
        raise ValidationError(errors)
    room = await lab_room_service.create(data, db)
    room.course_count = 0
    return LabRoomResponse.model_validate(room)


@router.patch("/{lab_room_id}", response_model=LabRoomResponse)
async def update_lab_room(
    lab_room_id: int,
    data: LabRoomUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.manage")),
):
    errors = validate_lab_room(data.model_dump(exclude_unset=True), partial=True)
    if errors:
        raise ValidationError(errors)
    await lab_room_service.update(lab_room_id, data, db)
    room = await lab_room_service.get_by_id(lab_room_id, db)
    return LabRoomResponse.model_validate(room)


@router.delete("/{lab_room_id}")
async def delete_lab_room(
    lab_room_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("labs.manage")),
):
    await lab_room_service.delete(lab_room_id, db)
    return {"deleted": True, "id": lab_room_id}
