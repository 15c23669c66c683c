from labmanager.validation.entities import (
    ROLE_EMAIL_DOMAINS,
    validate_availability,
    validate_course,
    validate_lab_room,
    validate_schedule_entry,
    validate_user,
)

__all__ = [
    "ROLE_EMAIL_DOMAINS",
    "validate_availability",
    "validate_course",
    "validate_lab_room",
    "validate_schedule_entry",
    "validate_user",
]
