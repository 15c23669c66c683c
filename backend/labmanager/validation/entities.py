import re
from typing import Optional

from labmanager.constants import (
    ROLES,
    ROLE_ADMIN,
    ROLE_INSTRUCTOR,
    ROLE_LAB_TECHNICIAN,
    ROLE_STUDENT,
    STATUSES,
    WEEKDAYS,
    SCHEDULE_STATUSES,
)
from labmanager.validation.rules import (
    CrossFieldRule,
    Email,
    IsoDate,
    Length,
    NotNull,
    OneOf,
    Pattern,
    Range,
    Required,
    RuleSet,
    TimeOfDay,
    is_blank,
)

ROLE_EMAIL_DOMAINS = {
    ROLE_ADMIN: ("@akbid.ac.id",),
    ROLE_INSTRUCTOR: ("@akbid.ac.id", "@lecturer.akbid.ac.id"),
    ROLE_LAB_TECHNICIAN: ("@akbid.ac.id", "@staff.akbid.ac.id"),
    ROLE_STUDENT: ("@student.akbid.ac.id", "@mhs.akbid.ac.id"),
}

_STUDENT_ID = re.compile(r"\d{8,10}")


def role_identifier_error(record: dict) -> Optional[str]:
    role = record.get("role")
    identifier = record.get("nim_nip")
    if role == ROLE_INSTRUCTOR:
        if is_blank(identifier):
            return "Employee number (NIP) is required for instructors"
        if not identifier.startswith(("19", "20")):
            return "Instructor NIP must start with 19 or 20"
    elif role == ROLE_LAB_TECHNICIAN:
        if is_blank(identifier):
            return "Employee number (NIP) is required for lab technicians"
    elif role == ROLE_STUDENT:
        if is_blank(identifier):
            return "Student number (NIM) is required for students"
        if not _STUDENT_ID.fullmatch(identifier):
            return "Student number (NIM) must be 8-10 digits"
    return None


def email_domain_error(record: dict) -> Optional[str]:
    role = record.get("role")
    email = record.get("email") or ""
    domains = ROLE_EMAIL_DOMAINS.get(role, ())
    if any(email.endswith(d) for d in domains):
        return None
    return f"Email for role {role} must use domain: {', '.join(domains)}"


def _time_order_error(record: dict) -> Optional[str]:
    start = record.get("start_time")
    end = record.get("end_time")
    if is_blank(start) or is_blank(end):
        return None
    if start >= end:
        return "End time must be after start time"
    return None


_user_fields = {
    "email": [Required("Email is required"), Email("Invalid email format")],
    "full_name": [
        Required("Full name is required"),
        Length(2, 100, "Full name must be 2-100 characters"),
    ],
    "role": [
        Required("Role is required"),
        OneOf(ROLES, f"Role must be one of: {', '.join(ROLES)}"),
    ],
    "nim_nip": [Length(5, 20, "NIM/NIP must be 5-20 characters")],
    "phone": [
        Pattern(r"(\+62|62|0)[0-9]{9,13}", "Invalid phone number format (example: 08123456789)"),
    ],
    "status": [NotNull("Status cannot be empty"), OneOf(STATUSES, "Status must be active or inactive")],
}

USER_RULES = RuleSet(
    _user_fields,
    [CrossFieldRule("nim_nip", ("role", "nim_nip"), role_identifier_error)],
)
USER_EMAIL_DOMAIN_RULE = CrossFieldRule("email", ("role", "email"), email_domain_error)
USER_RULES_WITH_DOMAINS = RuleSet(_user_fields, USER_RULES.cross_rules + (USER_EMAIL_DOMAIN_RULE,))

LAB_ROOM_RULES = RuleSet({
    "code": [
        Required("Lab code is required"),
        Pattern(r"[A-Z0-9-]+", "Lab code must contain only uppercase letters, numbers, and hyphens"),
    ],
    "name": [
        Required("Lab name is required"),
        Length(min_length=5, message="Lab name must be at least 5 characters"),
    ],
    "capacity": [
        Required("Capacity is required"),
        Range(1, 100, "Capacity must be between 1 and 100"),
    ],
    "location": [Required("Location is required")],
    "status": [NotNull("Status cannot be empty"), OneOf(STATUSES, "Status must be active or inactive")],
})

COURSE_RULES = RuleSet({
    "code": [
        Required("Course code is required"),
        Pattern(r"[A-Z]{2,4}\d{3,4}", "Course code format: ABC1234 (2-4 letters + 3-4 digits)"),
    ],
    "name": [
        Required("Course name is required"),
        Length(min_length=5, message="Course name must be at least 5 characters"),
    ],
    "credits": [
        Required("Credits are required"),
        Range(1, 6, "Credits must be between 1 and 6"),
    ],
    "semester": [
        Required("Semester is required"),
        Range(1, 8, "Semester must be between 1 and 8"),
    ],
    "status": [NotNull("Status cannot be empty"), OneOf(STATUSES, "Status must be active or inactive")],
})

SCHEDULE_ENTRY_RULES = RuleSet(
    {
        "course_id": [Required("Course is required")],
        "instructor_id": [NotNull("Instructor cannot be empty")],
        "lab_room_id": [Required("Lab room is required")],
        "weekday": [
            Required("Weekday is required"),
            OneOf(WEEKDAYS, f"Weekday must be one of: {', '.join(WEEKDAYS)}"),
        ],
        "date": [Required("Date is required"), IsoDate()],
        "start_time": [Required("Start time is required"), TimeOfDay()],
        "end_time": [Required("End time is required"), TimeOfDay()],
        "topic": [Required("Topic is required")],
        "status": [
            NotNull("Status cannot be empty"),
            OneOf(SCHEDULE_STATUSES, f"Status must be one of: {', '.join(SCHEDULE_STATUSES)}"),
        ],
        "max_attendees": [Range(minimum=1, message="Max attendees must be at least 1")],
    },
    [CrossFieldRule("end_time", ("start_time", "end_time"), _time_order_error)],
)

AVAILABILITY_RULES = RuleSet(
    {
        "lab_room_id": SCHEDULE_ENTRY_RULES.fields["lab_room_id"],
        "weekday": SCHEDULE_ENTRY_RULES.fields["weekday"],
        "date": SCHEDULE_ENTRY_RULES.fields["date"],
        "start_time": SCHEDULE_ENTRY_RULES.fields["start_time"],
        "end_time": SCHEDULE_ENTRY_RULES.fields["end_time"],
    },
    SCHEDULE_ENTRY_RULES.cross_rules,
)


def validate_user(
    record: dict,
    partial: bool = False,
    enforce_email_domains: bool = True,
    current: Optional[dict] = None,
) -> dict:
    """Validate a user record. On an update pass the stored fields as ``current``
    so role, identifier and email are checked together even when only one changes."""
    rules = USER_RULES_WITH_DOMAINS if enforce_email_domains else USER_RULES
    context = None if current is None else {**current, **record}
    return rules.validate(record, partial=partial, context=context)


def validate_lab_room(record: dict, partial: bool = False) -> dict:
    return LAB_ROOM_RULES.validate(record, partial=partial)


def validate_course(record: dict, partial: bool = False) -> dict:
    return COURSE_RULES.validate(record, partial=partial)


def validate_schedule_entry(record: dict, partial: bool = False) -> dict:
    return SCHEDULE_ENTRY_RULES.validate(record, partial=partial)


def validate_availability(record: dict) -> dict:
    return AVAILABILITY_RULES.validate(record)

