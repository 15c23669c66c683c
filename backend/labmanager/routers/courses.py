from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.config import get_settings
from labmanager.database import get_db
from labmanager.auth import require_permission, UserPrincipal
from labmanager.exceptions import ValidationError
from labmanager.schemas.course import (
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    CourseListResponse,
    CourseOption,
    CourseStats,
    InstructorAssignment,
)
from labmanager.services.course_service import course_service
from labmanager.validation import validate_course

router = APIRouter()
settings = get_settings()


@router.get("", response_model=CourseListResponse)
async def list_courses(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: str = Query("", description="Search by course code or name"),
    status: str = Query(""),
    semester: Optional[int] = Query(None, ge=1, le=8),
    instructor_id: Optional[int] = Query(None),
    lab_room_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    filters = {
        "search": search,
        "status": status,
        "semester": semester,
        "instructor_id": instructor_id,
        "lab_room_id": lab_room_id,
    }
    result = await course_service.list(filters, page, page_size, db)
    return CourseListResponse(
        items=[CourseResponse.model_validate(c) for c in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get("/options", response_model=list[CourseOption])
async def course_options(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    courses = await course_service.options(db)
    return [CourseOption.model_validate(c) for c in courses]


@router.get("/mine", response_model=list[CourseResponse])
async def my_courses(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    """Active courses taught by the caller."""
    if current_user.user_id is None:
        return []
    courses = await course_service.list_for_instructor(current_user.user_id, db)
    return [CourseResponse.model_validate(c) for c in courses]


@router.get("/stats", response_model=CourseStats)
async def course_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    return CourseStats(**await course_service.stats(db))


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.view")),
):
    course = await course_service.get_by_id(course_id, db)
    if not course:
        raise HTTPException(status_code=404, detail=f"Course {course_id} not found")
    return CourseResponse.model_validate(course)


@router.post("", response_model=CourseResponse, status_code=201)
async def create_course(
    data: CourseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.manage")),
):
    errors = validate_course(data.model_dump())
    if errors:
        raise ValidationError(errors)
    course = await course_service.create(data, db)
    return CourseResponse.model_validate(course)


@router.patch("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    data: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.manage")),
):
    errors = validate_course(data.model_dump(exclude_unset=True), partial=True)
    if errors:
        raise ValidationError(errors)
    course = await course_service.update(course_id, data, db)
    return CourseResponse.model_validate(course)


@router.put("/{course_id}/instructor", response_model=CourseResponse)
async def assign_instructor(
    course_id: int,
    data: InstructorAssignment,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.manage")),
):
    course = await course_service.assign_instructor(course_id, data.instructor_id, db)
    return CourseResponse.model_validate(course)


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_permission("subjects.manage")),
):
    await course_service.delete(course_id, db)
    return {"deleted": True, "id": course_id}
