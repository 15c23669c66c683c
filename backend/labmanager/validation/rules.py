"""
Declarative field rules.

A ``RuleSet`` maps field names to ordered rule lists plus optional
cross-field rules, and reports the first violated message per field. It
only reads the record it is given, so it can be re-run on every edit of a
partially filled form.
"""

import re
from datetime import date
from typing import Callable, Iterable, Optional

_MISSING = object()


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Rule:
    """A single-field check. ``check`` returns True when the value is acceptable."""

    # Non-Required rules leave blank values to Required
    skip_blank = True
    # Only checked on partial updates, where a present key means "set to this"
    partial_only = False

    def __init__(self, message: str):
        self.message = message

    def check(self, value) -> bool:
        raise NotImplementedError


class Required(Rule):
    skip_blank = False

    def __init__(self, message: str = "This field is required"):
        super().__init__(message)

    def check(self, value) -> bool:
        if isinstance(value, (list, tuple, set, dict)):
            return len(value) > 0
        return not is_blank(value)


class NotNull(Rule):
    """Rejects an explicit null in a partial update of a column that cannot be empty."""

    skip_blank = False
    partial_only = True

    def __init__(self, message: str = "This field cannot be empty"):
        super().__init__(message)

    def check(self, value) -> bool:
        return value is not None


class Pattern(Rule):
    def __init__(self, pattern: str, message: str):
        super().__init__(message)
        self.regex = re.compile(pattern)

    def check(self, value) -> bool:
        return isinstance(value, str) and self.regex.fullmatch(value) is not None


class Length(Rule):
    def __init__(self, min_length: Optional[int] = None, max_length: Optional[int] = None, message: str = ""):
        super().__init__(message or f"Length must be between {min_length} and {max_length} characters")
        self.min_length = min_length
        self.max_length = max_length

    def check(self, value) -> bool:
        if not isinstance(value, str):
            return False
        length = len(value.strip())
        if self.min_length is not None and length < self.min_length:
            return False
        if self.max_length is not None and length > self.max_length:
            return False
        return True


class Range(Rule):
    def __init__(self, minimum=None, maximum=None, message: str = ""):
        super().__init__(message or f"Value must be between {minimum} and {maximum}")
        self.minimum = minimum
        self.maximum = maximum

    def check(self, value) -> bool:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


class OneOf(Rule):
    def __init__(self, choices: Iterable, message: str = ""):
        self.choices = tuple(choices)
        super().__init__(message or f"Must be one of: {', '.join(map(str, self.choices))}")

    def check(self, value) -> bool:
        return value in self.choices


class Email(Pattern):
    def __init__(self, message: str = "Invalid email format"):
        super().__init__(r"[^@\s]+@[^@\s]+\.[^@\s]+", message)


class TimeOfDay(Pattern):
    def __init__(self, message: str = "Time must use the HH:MM format"):
        super().__init__(r"([01]\d|2[0-3]):[0-5]\d", message)


class IsoDate(Rule):
    def __init__(self, message: str = "Date must use the YYYY-MM-DD format"):
        super().__init__(message)

    def check(self, value) -> bool:
        if isinstance(value, date):
            return True
        if not isinstance(value, str):
            return False
        try:
            date.fromisoformat(value)
        except ValueError:
            return False
        return len(value) == 10


class CrossFieldRule:
    """A rule over several fields whose message lands on ``target``.

    ``check`` receives a read-only view of the record and returns an error
    message or None. In partial mode it only runs when every field in
    ``fields`` is present.
    """

    def __init__(self, target: str, fields: Iterable[str], check: Callable[[dict], Optional[str]]):
        self.target = target
        self.fields = tuple(fields)
        self.check = check


class RuleSet:
    def __init__(self, fields: dict, cross_rules: Iterable[CrossFieldRule] = ()):
        self.fields = fields
        self.cross_rules = tuple(cross_rules)

    def validate(self, record: dict, partial: bool = False, context: Optional[dict] = None) -> dict:
        """Check ``record`` field by field, then the cross-field rules.

        ``context`` is the full record an edit will produce (stored row merged
        with the patch). When given, cross-field rules read from it and run
        whenever the patch touches one of their fields.
        """
        errors: dict[str, str] = {}

        for field, rules in self.fields.items():
            value = record.get(field, _MISSING)
            if value is _MISSING:
                if partial:
                    continue
                value = None
            for rule in rules:
                if rule.partial_only and not partial:
                    continue
                if rule.skip_blank and is_blank(value):
                    continue
                if not rule.check(value):
                    errors[field] = rule.message
                    break

        source = record if context is None else context
        for cross in self.cross_rules:
            if cross.target in errors:
                continue
            if partial:
                if context is None and not all(f in record for f in cross.fields):
                    continue
                if context is not None and not any(f in record for f in cross.fields):
                    continue
            if any(f in errors for f in cross.fields):
                continue
            message = cross.check(source)
            if message:
                errors[cross.target] = message

        return errors
