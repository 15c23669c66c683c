from fastapi import APIRouter, Depends, Query
from labmanager.auth import get_current_user, UserPrincipal
from labmanager.rbac.permissions import PermissionChecker, get_permission_checker

router = APIRouter()


@router.get("/me")
async def my_permissions(
    current_user: UserPrincipal = Depends(get_current_user),
    checker: PermissionChecker = Depends(get_permission_checker),
):
    """The caller's role with everything it unlocks, for menus and route guards."""
    return {
        "role": current_user.role,
        "permissions": [p.id for p in checker.get_role_permissions(current_user.role)],
        "routes": checker.get_allowed_routes(current_user.role),
        "features": checker.get_features(current_user.role),
    }


@router.get("/check")
async def check_access(
    route: str = Query("", description="Front-end route to test"),
    feature: str = Query(""),
    permission: str = Query(""),
    current_user: UserPrincipal = Depends(get_current_user),
    checker: PermissionChecker = Depends(get_permission_checker),
):
    result = {"role": current_user.role}
    if route:
        result["route"] = checker.can_access_route(current_user.role, route)
    if feature:
        result["feature"] = checker.has_feature_access(current_user.role, feature)
    if permission:
        result["permission"] = checker.has_permission(current_user.role, permission)
    return result
