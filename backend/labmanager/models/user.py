from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from labmanager.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(200), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)  # "admin" | "instructor" | "lab_technician" | "student"
    nim_nip = Column(String(20), unique=True, index=True)  # institutional identifier
    phone = Column(String(20))
    status = Column(String(10), nullable=False, default="active")
    lab_room_id = Column(Integer, ForeignKey("lab_rooms.id", ondelete="SET NULL"), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    lab_room = relationship("LabRoom", foreign_keys=[lab_room_id], lazy="selectin")
