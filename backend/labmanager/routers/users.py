from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.config import get_settings
from labmanager.database import get_db
from labmanager.auth import require_permission, UserPrincipal
from labmanager.exceptions import ValidationError
from labmanager.schemas.common import UserBrief
from labmanager.schemas.user import UserCreate, UserUpdate, UserResponse, UserListResponse, UserStats
from labmanager.services.user_service import user_service
from labmanager.validation import validate_user

router = APIRouter()
settings = get_settings()


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str = Query("", description="Search by name, email, or NIM/NIP"),
    role: str = Query(""),
    status: str = Query(""),
    lab_room_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.view")),
):
    filters = {"search": search, "role": role, "status": status, "lab_room_id": lab_room_id}
    result = await user_service.list(filters, page, page_size, db)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/instructors", response_model=list[UserBrief])
async def list_instructors(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    instructors = await user_service.list_instructors(db)
    return [UserBrief.model_validate(u) for u in instructors]


@router.get("/stats", response_model=UserStats)
async def user_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.view")),
):
    return UserStats(**await user_service.stats(db))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.view")),
):
    user = await user_service.get_by_id(user_id, db)
    if not user:
        raise HTTPException(status_code=404, detail=f"User {user_id} not found")
    return UserResponse.model_validate(user)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.create")),
):
    errors = validate_user(data.model_dump(), enforce_email_domains=settings.enforce_email_domains)
    if errors:
        raise ValidationError(errors)
    user = await user_service.create(data, db)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.edit")),
):
    existing = await user_service.get_or_raise(user_id, db)
    errors = validate_user(
        data.model_dump(exclude_unset=True),
        partial=True,
        enforce_email_domains=settings.enforce_email_domains,
        current={"email": existing.email, "role": existing.role, "nim_nip": existing.nim_nip},
    )
    if errors:
        raise ValidationError(errors)
    user = await user_service.update(user_id, data, db)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("users.delete")),
):
    await user_service.delete(user_id, db)
    return {"deleted": True, "id": user_id}
