from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from labmanager.database import Base


class LabRoom(Base):
    __tablename__ = "lab_rooms"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    capacity = Column(Integer, nullable=False)
    status = Column(String(10), nullable=False, default="active")
    location = Column(String(200))
    facilities = Column(JSON, default=list)
    # Person in charge; users.lab_room_id points back here, so this side is added by ALTER
    pic_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_lab_rooms_pic_id"),
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    pic = relationship("User", foreign_keys=[pic_id], lazy="selectin")
