from typing import Optional


class LabManagerError(Exception):
    """Base class for every error the services raise on purpose."""

    error_kind = "error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(LabManagerError):
    error_kind = "validation_error"

    def __init__(self, errors: dict):
        self.errors = dict(errors)
        super().__init__("Validation failed", {"errors": self.errors})


class DuplicateKeyError(LabManagerError):
    error_kind = "duplicate_key"

    def __init__(self, entity: str, field: str, value):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            {"entity": entity, "field": field, "value": value},
        )


class NotFoundError(LabManagerError):
    error_kind = "not_found"

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found", {"entity": entity, "id": entity_id})


class DependencyExistsError(LabManagerError):
    error_kind = "dependency_exists"

    def __init__(self, entity: str, entity_id, dependent: str):
        self.entity = entity
        self.entity_id = entity_id
        self.dependent = dependent
        super().__init__(
            f"Cannot delete {entity} {entity_id}: it is still referenced by {dependent}",
            {"entity": entity, "id": entity_id, "dependent": dependent},
        )


class RoomConflictError(LabManagerError):
    error_kind = "room_conflict"

    def __init__(self, conflicts: list):
        self.conflicts = list(conflicts)
        names = ", ".join(c["course"] for c in self.conflicts)
        super().__init__(
            f"Lab room is not available at the requested time. Conflicts: {names}",
            {"conflicts": self.conflicts},
        )


class InvalidStatusTransitionError(LabManagerError):
    error_kind = "invalid_status_transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change schedule status from '{current}' to '{requested}'",
            {"current": current, "requested": requested},
        )


class PermissionDeniedError(LabManagerError):
    error_kind = "permission_denied"

    def __init__(self, role: Optional[str], permissions: list):
        self.role = role
        self.permissions = list(permissions)
        super().__init__(
            f"Role '{role}' lacks permission: {', '.join(self.permissions)}",
            {"role": role, "permissions": self.permissions},
        )


class StoreError(LabManagerError):
    """The store could not be reached or rejected the query."""

    error_kind = "store_error"
