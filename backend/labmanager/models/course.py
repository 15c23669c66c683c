from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from labmanager.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(8), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    credits = Column(Integer, nullable=False)
    semester = Column(Integer, nullable=False)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    lab_room_id = Column(Integer, ForeignKey("lab_rooms.id"), index=True)
    status = Column(String(10), nullable=False, default="active")
    description = Column(Text)
    syllabus = Column(Text)
    learning_outcomes = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    instructor = relationship("User", foreign_keys=[instructor_id], lazy="selectin")
    lab_room = relationship("LabRoom", foreign_keys=[lab_room_id], lazy="selectin")
