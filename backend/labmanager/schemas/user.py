from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from labmanager.schemas.common import LabRoomBrief


class UserBase(BaseModel):
    email: str
    full_name: str
    role: str
    nim_nip: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    lab_room_id: Optional[int] = None


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    nim_nip: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    lab_room_id: Optional[int] = None


class UserResponse(UserBase):
    id: int
    status: str
    lab_room: Optional[LabRoomBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class UserStats(BaseModel):
    total: int
    by_role: dict[str, int]
    by_status: dict[str, int]
