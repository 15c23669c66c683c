ROLE_ADMIN = "admin"
ROLE_INSTRUCTOR = "instructor"
ROLE_LAB_TECHNICIAN = "lab_technician"
ROLE_STUDENT = "student"
ROLES = (ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_LAB_TECHNICIAN, ROLE_STUDENT)

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

WEEKDAYS = ("senin", "selasa", "rabu", "kamis", "jumat", "sabtu", "minggu")

SCHEDULED = "scheduled"
ONGOING = "ongoing"
COMPLETED = "completed"
CANCELLED = "cancelled"
SCHEDULE_STATUSES = (SCHEDULED, ONGOING, COMPLETED, CANCELLED)

# Allowed next states for a schedule entry; completed and cancelled are terminal
SCHEDULE_TRANSITIONS = {
    SCHEDULED: (ONGOING, CANCELLED),
    ONGOING: (COMPLETED, CANCELLED),
    COMPLETED: (),
    CANCELLED: (),
}
