from labmanager.models.user import User
from labmanager.models.lab_room import LabRoom
from labmanager.models.course import Course
from labmanager.models.schedule_entry import ScheduleEntry

__all__ = ["User", "LabRoom", "Course", "ScheduleEntry"]
