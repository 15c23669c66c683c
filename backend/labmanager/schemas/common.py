from pydantic import BaseModel
from typing import Optional


class UserBrief(BaseModel):
    id: int
    full_name: str
    email: str

    class Config:
        from_attributes = True


class LabRoomBrief(BaseModel):
    id: int
    code: str
    name: str
    capacity: Optional[int] = None

    class Config:
        from_attributes = True


class CourseBrief(BaseModel):
    id: int
    code: str
    name: str
    credits: Optional[int] = None
    semester: Optional[int] = None

    class Config:
        from_attributes = True


class ErrorResponse(BaseModel):
    detail: str
    error: str
