from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from labmanager.database import Base


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        Index("ix_schedule_entries_slot", "lab_room_id", "weekday", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lab_room_id = Column(Integer, ForeignKey("lab_rooms.id"), nullable=False)
    weekday = Column(String(10), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM", same day as start_time
    topic = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="scheduled")
    notes = Column(Text)
    max_attendees = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    course = relationship("Course", lazy="selectin")
    instructor = relationship("User", foreign_keys=[instructor_id], lazy="selectin")
    lab_room = relationship("LabRoom", lazy="selectin")
