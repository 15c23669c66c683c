from labmanager.rbac.permissions import (
    PERMISSIONS,
    ROLE_PERMISSIONS,
    Permission,
    PermissionChecker,
    RolePermissions,
    get_permission_checker,
)

__all__ = [
    "PERMISSIONS",
    "ROLE_PERMISSIONS",
    "Permission",
    "PermissionChecker",
    "RolePermissions",
    "get_permission_checker",
]
