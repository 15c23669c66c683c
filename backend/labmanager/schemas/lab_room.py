from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from labmanager.schemas.common import UserBrief


class LabRoomBase(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    capacity: int
    status: Optional[str] = None
    location: Optional[str] = None
    facilities: list[str] = []
    pic_id: Optional[int] = None


class LabRoomCreate(LabRoomBase):
    pass


class LabRoomUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    status: Optional[str] = None
    location: Optional[str] = None
    facilities: Optional[list[str]] = None
    pic_id: Optional[int] = None


class LabRoomResponse(LabRoomBase):
    id: int
    status: str
    facilities: Optional[list[str]] = None
    pic: Optional[UserBrief] = None
    course_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LabRoomListResponse(BaseModel):
    items: list[LabRoomResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class LabRoomOption(BaseModel):
    id: int
    code: str
    name: str
    capacity: int

    class Config:
        from_attributes = True


class LabRoomStats(BaseModel):
    total: int
    active: int
    inactive: int
    total_capacity: int
