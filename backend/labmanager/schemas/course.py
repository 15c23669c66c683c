from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from labmanager.schemas.common import UserBrief, LabRoomBrief


class CourseBase(BaseModel):
    code: str
    name: str
    credits: int
    semester: int
    instructor_id: Optional[int] = None
    lab_room_id: Optional[int] = None
    status: Optional[str] = None
    description: Optional[str] = None
    syllabus: Optional[str] = None
    learning_outcomes: list[str] = []


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    credits: Optional[int] = None
    semester: Optional[int] = None
    instructor_id: Optional[int] = None
    lab_room_id: Optional[int] = None
    status: Optional[str] = None
    description: Optional[str] = None
    syllabus: Optional[str] = None
    learning_outcomes: Optional[list[str]] = None


class InstructorAssignment(BaseModel):
    instructor_id: int


class CourseResponse(CourseBase):
    id: int
    status: str
    learning_outcomes: Optional[list[str]] = None
    instructor: Optional[UserBrief] = None
    lab_room: Optional[LabRoomBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CourseListResponse(BaseModel):
    items: list[CourseResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CourseOption(BaseModel):
    id: int
    code: str
    name: str
    credits: int

    class Config:
        from_attributes = True


class CourseStats(BaseModel):
    total: int
    active: int
    inactive: int
    total_credits: int
    by_semester: dict[int, int]
