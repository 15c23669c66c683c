from pydantic import BaseModel
from datetime import date as date_type, datetime
from typing import Optional
from labmanager.schemas.common import UserBrief, LabRoomBrief, CourseBrief


class ScheduleEntryBase(BaseModel):
    course_id: int
    lab_room_id: int
    weekday: str
    date: date_type
    start_time: str
    end_time: str
    topic: str
    status: Optional[str] = None
    notes: Optional[str] = None
    max_attendees: Optional[int] = None


class ScheduleEntryCreate(ScheduleEntryBase):
    # Defaults to the course's instructor, then to the caller
    instructor_id: Optional[int] = None


class ScheduleEntryUpdate(BaseModel):
    course_id: Optional[int] = None
    instructor_id: Optional[int] = None
    lab_room_id: Optional[int] = None
    weekday: Optional[str] = None
    date: Optional[date_type] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    topic: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    max_attendees: Optional[int] = None


class ScheduleEntryResponse(ScheduleEntryBase):
    id: int
    instructor_id: int
    status: str
    course: Optional[CourseBrief] = None
    instructor: Optional[UserBrief] = None
    lab_room: Optional[LabRoomBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScheduleEntryListResponse(BaseModel):
    items: list[ScheduleEntryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class AvailabilityRequest(BaseModel):
    lab_room_id: int
    weekday: str
    date: date_type
    start_time: str
    end_time: str
    exclude_entry_id: Optional[int] = None


class ScheduleConflict(BaseModel):
    id: int
    course: str
    instructor: str
    start_time: str
    end_time: str


class AvailabilityResponse(BaseModel):
    available: bool
    conflicts: list[ScheduleConflict]


class ScheduleStats(BaseModel):
    total: int
    scheduled: int
    ongoing: int
    completed: int
    cancelled: int
