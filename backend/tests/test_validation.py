from datetime import date

import pytest

from labmanager.validation import (
    validate_availability,
    validate_course,
    validate_lab_room,
    validate_schedule_entry,
    validate_user,
)
from labmanager.validation.rules import CrossFieldRule, Length, Range, Required, RuleSet


def _user(**overrides):
    record = {
        "email": "dosen@lecturer.akbid.ac.id",
        "full_name": "Dr. Sari Wulandari",
        "role": "instructor",
        "nim_nip": "198501012010",
    }
    record.update(overrides)
    return record


def _entry(**overrides):
    record = {
        "course_id": 1,
        "lab_room_id": 1,
        "weekday": "senin",
        "date": "2024-03-04",
        "start_time": "09:00",
        "end_time": "11:00",
        "topic": "Antenatal examination",
    }
    record.update(overrides)
    return record


class TestRuleSet:
    def test_first_failing_rule_wins(self):
        rules = RuleSet({"name": [Required("required"), Length(5, message="too short")]})
        assert rules.validate({"name": ""}) == {"name": "required"}
        assert rules.validate({"name": "abc"}) == {"name": "too short"}
        assert rules.validate({"name": "abcdef"}) == {}

    def test_length_counts_stripped_value(self):
        rules = RuleSet({"name": [Length(5, message="too short")]})
        assert rules.validate({"name": "  ab   "}) == {"name": "too short"}

    def test_optional_rules_skip_blank_values(self):
        rules = RuleSet({"capacity": [Range(1, 100, "out of range")]})
        assert rules.validate({}) == {}
        assert rules.validate({"capacity": None}) == {}

    def test_range_rejects_non_numbers(self):
        rules = RuleSet({"capacity": [Range(1, 100, "out of range")]})
        assert rules.validate({"capacity": "50"}) == {"capacity": "out of range"}
        assert rules.validate({"capacity": True}) == {"capacity": "out of range"}

    def test_partial_mode_ignores_absent_fields(self):
        rules = RuleSet({"a": [Required("a required")], "b": [Required("b required")]})
        assert rules.validate({"a": "x"}, partial=True) == {}
        assert rules.validate({"a": "x"}) == {"b": "b required"}

    def test_cross_rule_skipped_when_member_field_invalid(self):
        calls = []

        def check(record):
            calls.append(record)
            return "bad pair"

        rules = RuleSet({"a": [Required("a required")]}, [CrossFieldRule("b", ("a", "b"), check)])
        assert rules.validate({"a": "", "b": "y"}) == {"a": "a required"}
        assert calls == []
        assert rules.validate({"a": "x", "b": "y"}) == {"b": "bad pair"}

    def test_validate_does_not_mutate_record(self):
        record = _entry(end_time="08:00")
        snapshot = dict(record)
        validate_schedule_entry(record)
        assert record == snapshot


class TestUserValidation:
    def test_valid_instructor(self):
        assert validate_user(_user()) == {}

    def test_required_fields(self):
        errors = validate_user({})
        assert errors["email"] == "Email is required"
        assert errors["full_name"] == "Full name is required"
        assert errors["role"] == "Role is required"

    def test_invalid_email(self):
        assert validate_user(_user(email="not-an-email"))["email"] == "Invalid email format"

    def test_unknown_role(self):
        assert "role" in validate_user(_user(role="guest"))

    def test_instructor_nip_prefix(self):
        errors = validate_user(_user(nim_nip="178501012010"))
        assert errors == {"nim_nip": "Instructor NIP must start with 19 or 20"}

    def test_instructor_nip_required(self):
        errors = validate_user(_user(nim_nip=None))
        assert errors == {"nim_nip": "Employee number (NIP) is required for instructors"}

    def test_student_nim_digits(self):
        record = _user(email="rina@student.akbid.ac.id", role="student", nim_nip="20AB0001")
        assert validate_user(record) == {"nim_nip": "Student number (NIM) must be 8-10 digits"}
        assert validate_user(dict(record, nim_nip="2021000001")) == {}

    def test_admin_needs_no_identifier(self):
        assert validate_user(_user(email="admin@akbid.ac.id", role="admin", nim_nip=None)) == {}

    def test_email_domain_follows_role(self):
        record = _user(email="rina@gmail.com")
        assert "email" in validate_user(record)
        assert validate_user(record, enforce_email_domains=False) == {}

    def test_phone_format(self):
        assert validate_user(_user(phone="08123456789")) == {}
        assert "phone" in validate_user(_user(phone="12345"))

    def test_partial_update_checks_only_given_fields(self):
        assert validate_user({"full_name": "Sari"}, partial=True) == {}
        assert validate_user({"full_name": "S"}, partial=True) == {"full_name": "Full name must be 2-100 characters"}


class TestLabRoomValidation:
    def test_valid(self):
        record = {"code": "LAB-001", "name": "Midwifery Skills Lab", "capacity": 20, "location": "Building A"}
        assert validate_lab_room(record) == {}

    @pytest.mark.parametrize(
        "field,value",
        [("code", "lab-001"), ("name", "Lab"), ("capacity", 0), ("capacity", 101), ("location", "")],
    )
    def test_invalid_fields(self, field, value):
        record = {"code": "LAB-001", "name": "Midwifery Skills Lab", "capacity": 20, "location": "Building A"}
        record[field] = value
        assert list(validate_lab_room(record)) == [field]


class TestCourseValidation:
    def test_valid(self):
        assert validate_course({"code": "KEB301", "name": "Antenatal Care", "credits": 3, "semester": 3}) == {}

    @pytest.mark.parametrize("code", ["K301", "keb301", "KEBID301", "KEB30"])
    def test_code_format(self, code):
        errors = validate_course({"code": code, "name": "Antenatal Care", "credits": 3, "semester": 3})
        assert list(errors) == ["code"]

    def test_credit_and_semester_bounds(self):
        errors = validate_course({"code": "KEB301", "name": "Antenatal Care", "credits": 7, "semester": 9})
        assert errors == {"credits": "Credits must be between 1 and 6", "semester": "Semester must be between 1 and 8"}


class TestScheduleValidation:
    def test_valid(self):
        assert validate_schedule_entry(_entry()) == {}
        assert validate_schedule_entry(_entry(date=date(2024, 3, 4))) == {}

    def test_end_must_follow_start(self):
        assert validate_schedule_entry(_entry(end_time="09:00")) == {"end_time": "End time must be after start time"}

    def test_time_format(self):
        errors = validate_schedule_entry(_entry(start_time="9:00", end_time="24:00"))
        assert set(errors) == {"start_time", "end_time"}

    def test_bad_weekday_and_date(self):
        errors = validate_schedule_entry(_entry(weekday="monday", date="04-03-2024"))
        assert set(errors) == {"weekday", "date"}

    def test_partial_time_change_alone_skips_order_check(self):
        assert validate_schedule_entry({"end_time": "08:00"}, partial=True) == {}

    def test_availability_request(self):
        record = {"lab_room_id": 1, "weekday": "senin", "date": "2024-03-04", "start_time": "10:00", "end_time": "09:00"}
        assert validate_availability(record) == {"end_time": "End time must be after start time"}


class TestPartialUpdates:
    STORED = {"email": "mahasiswa@student.akbid.ac.id", "role": "student", "nim_nip": "2021000001"}

    def test_role_change_checked_against_stored_email(self):
        errors = validate_user({"role": "admin"}, partial=True, current=self.STORED)
        assert list(errors) == ["email"]

    def test_identifier_change_checked_against_stored_role(self):
        errors = validate_user({"nim_nip": "ABCDE"}, partial=True, current=self.STORED)
        assert errors == {"nim_nip": "Student number (NIM) must be 8-10 digits"}

    def test_untouched_cross_fields_are_not_rechecked(self):
        legacy = dict(self.STORED, email="old@gmail.com")
        assert validate_user({"full_name": "Rina Putri"}, partial=True, current=legacy) == {}

    def test_consistent_change_passes(self):
        patch = {"role": "admin", "email": "rina@akbid.ac.id"}
        assert validate_user(patch, partial=True, current=self.STORED) == {}

    def test_explicit_null_rejected_only_on_update(self):
        record = {"code": "LAB-001", "name": "Midwifery Skills Lab", "capacity": 20, "location": "A", "status": None}
        assert validate_lab_room(record) == {}
        assert validate_lab_room({"status": None}, partial=True) == {"status": "Status cannot be empty"}
        assert validate_course({"status": None}, partial=True) == {"status": "Status cannot be empty"}
        assert validate_schedule_entry({"instructor_id": None}, partial=True) == {
            "instructor_id": "Instructor cannot be empty"
        }
