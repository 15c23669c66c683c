"""
Role-based permission table and checker.

The table is built once at import time and is immutable: permissions are
frozen dataclasses, per-role entries hold tuples, and the role mapping is a
read-only proxy. ``PermissionChecker`` receives the table it answers from,
so callers (and tests) can inject a different one.
"""

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from labmanager.constants import ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_LAB_TECHNICIAN, ROLE_STUDENT


@dataclass(frozen=True)
class Permission:
    id: str
    name: str
    description: str
    resource: str
    action: str


@dataclass(frozen=True)
class RolePermissions:
    role: str
    permissions: tuple
    routes: tuple
    features: tuple

    @property
    def permission_ids(self) -> frozenset:
        return frozenset(p.id for p in self.permissions)


def _perm(perm_id: str, name: str, description: str) -> Permission:
    resource, action = perm_id.split(".", 1)
    return Permission(id=perm_id, name=name, description=description, resource=resource, action=action)


_CATALOGUE = [
    # User management
    _perm("users.view", "View Users", "Can view user list and details"),
    _perm("users.create", "Create Users", "Can create new users"),
    _perm("users.edit", "Edit Users", "Can edit user information"),
    _perm("users.delete", "Delete Users", "Can delete users"),
    # Lab rooms
    _perm("labs.view", "View Labs", "Can view lab rooms and details"),
    _perm("labs.manage", "Manage Labs", "Can create, edit, and configure lab rooms"),
    # Courses
    _perm("subjects.view", "View Subjects", "Can view the course list"),
    _perm("subjects.manage", "Manage Subjects", "Can create and edit courses"),
    _perm("subjects.own", "Manage Own Subjects", "Can manage only assigned courses"),
    # Practicum schedule
    _perm("schedule.view", "View Schedule", "Can view the practicum schedule"),
    _perm("schedule.manage", "Manage Schedule", "Can create and edit the practicum schedule"),
    _perm("schedule.own", "Manage Own Schedule", "Can manage only own practicum sessions"),
    # Inventory
    _perm("inventory.view", "View Inventory", "Can view lab equipment inventory"),
    _perm("inventory.manage", "Manage Inventory", "Can add, edit, and delete inventory items"),
    # Borrowing
    _perm("borrowing.view", "View Borrowing", "Can view borrowing requests"),
    _perm("borrowing.request", "Request Borrowing", "Can create borrowing requests"),
    _perm("borrowing.approve", "Approve Borrowing", "Can approve or reject borrowing requests"),
    # Attendance
    _perm("attendance.view", "View Attendance", "Can view attendance records"),
    _perm("attendance.mark", "Mark Attendance", "Can mark student attendance"),
    _perm("attendance.own", "View Own Attendance", "Can view own attendance records"),
    # Reports
    _perm("reports.view", "View Reports", "Can view student reports"),
    _perm("reports.submit", "Submit Reports", "Can submit practicum reports"),
    _perm("reports.grade", "Grade Reports", "Can grade and review student reports"),
    # Materials
    _perm("materials.view", "View Materials", "Can view practicum materials"),
    _perm("materials.manage", "Manage Materials", "Can upload and manage practicum materials"),
    # System
    _perm("system.reports", "System Reports", "Can view system-wide reports and analytics"),
]

PERMISSIONS: Mapping[str, Permission] = MappingProxyType({p.id: p for p in _CATALOGUE})


def _role(role: str, permission_ids: Iterable[str], routes: Iterable[str], features: Iterable[str]) -> RolePermissions:
    return RolePermissions(
        role=role,
        permissions=tuple(PERMISSIONS[pid] for pid in permission_ids),
        routes=tuple(routes),
        features=tuple(features),
    )


_INSTRUCTOR_FEATURES = (
    "subject-teaching",
    "schedule-management",
    "attendance-marking",
    "report-grading",
    "material-management",
)
_LAB_TECHNICIAN_FEATURES = (
    "inventory-management",
    "borrowing-approval",
    "equipment-maintenance",
    "stock-management",
)
_STUDENT_FEATURES = (
    "schedule-viewing",
    "material-access",
    "report-submission",
    "attendance-viewing",
    "profile-management",
)

ROLE_PERMISSIONS: Mapping[str, RolePermissions] = MappingProxyType({
    ROLE_ADMIN: _role(
        ROLE_ADMIN,
        [p.id for p in _CATALOGUE],
        [
            "/admin",
            "/admin/users",
            "/admin/labs",
            "/admin/subjects",
            "/admin/reports",
            "/instructor",
            "/lab-technician",
            "/student",
            "/dashboard",
        ],
        ("user-management", "lab-management", "system-reports", "subject-management")
        + _LAB_TECHNICIAN_FEATURES
        + _INSTRUCTOR_FEATURES
        + _STUDENT_FEATURES,
    ),
    ROLE_INSTRUCTOR: _role(
        ROLE_INSTRUCTOR,
        [
            "subjects.view",
            "subjects.own",
            "schedule.view",
            "schedule.own",
            "labs.view",
            "attendance.view",
            "attendance.mark",
            "reports.view",
            "reports.grade",
            "materials.view",
            "materials.manage",
            "borrowing.view",
            "borrowing.request",
        ],
        [
            "/instructor",
            "/instructor/subjects",
            "/instructor/schedule",
            "/instructor/attendance",
            "/instructor/reports",
            "/instructor/materials",
            "/instructor/borrowing",
            "/dashboard",
        ],
        _INSTRUCTOR_FEATURES,
    ),
    ROLE_LAB_TECHNICIAN: _role(
        ROLE_LAB_TECHNICIAN,
        [
            "inventory.view",
            "inventory.manage",
            "borrowing.view",
            "borrowing.approve",
            "labs.view",
            "schedule.view",
        ],
        [
            "/lab-technician",
            "/lab-technician/inventory",
            "/lab-technician/borrowing",
            "/lab-technician/maintenance",
            "/lab-technician/stock",
            "/dashboard",
        ],
        _LAB_TECHNICIAN_FEATURES,
    ),
    ROLE_STUDENT: _role(
        ROLE_STUDENT,
        [
            "schedule.view",
            "materials.view",
            "reports.submit",
            "attendance.own",
            "reports.view",
        ],
        [
            "/student",
            "/student/schedule",
            "/student/materials",
            "/student/reports",
            "/student/attendance",
            "/student/profile",
            "/dashboard",
        ],
        _STUDENT_FEATURES,
    ),
})


class PermissionChecker:
    """Answers role questions against an injected permission table.

    Every method is total: an unknown or missing role yields False (or an
    empty list) and nothing raises.
    """

    def __init__(self, table: Mapping[str, RolePermissions]):
        self._table = table

    def _lookup(self, role: Optional[str]) -> Optional[RolePermissions]:
        if not isinstance(role, str):
            return None
        return self._table.get(role)

    def has_permission(self, role: Optional[str], permission_id: str) -> bool:
        entry = self._lookup(role)
        if entry is None:
            return False
        return permission_id in entry.permission_ids

    def can_access_route(self, role: Optional[str], route: str) -> bool:
        entry = self._lookup(role)
        if entry is None or not isinstance(route, str):
            return False
        if route in entry.routes:
            return True
        # Prefix match in either direction: "/admin/users/5" is under "/admin",
        # and "/admin" is an ancestor of the allowed "/admin/users".
        return any(route.startswith(allowed) or allowed.startswith(route) for allowed in entry.routes)

    def has_feature_access(self, role: Optional[str], feature: str) -> bool:
        entry = self._lookup(role)
        if entry is None:
            return False
        return feature in entry.features

    def get_role_permissions(self, role: Optional[str]) -> list[Permission]:
        entry = self._lookup(role)
        return list(entry.permissions) if entry else []

    def get_allowed_routes(self, role: Optional[str]) -> list[str]:
        entry = self._lookup(role)
        return list(entry.routes) if entry else []

    def get_features(self, role: Optional[str]) -> list[str]:
        entry = self._lookup(role)
        return list(entry.features) if entry else []

    def has_all_permissions(self, role: Optional[str], permission_ids: Iterable[str]) -> bool:
        if self._lookup(role) is None:
            return False
        return all(self.has_permission(role, pid) for pid in permission_ids)

    def has_any_permission(self, role: Optional[str], permission_ids: Iterable[str]) -> bool:
        return any(self.has_permission(role, pid) for pid in permission_ids)


@lru_cache()
def get_permission_checker() -> PermissionChecker:
    """Process-wide checker over the built-in table."""
    return PermissionChecker(ROLE_PERMISSIONS)
