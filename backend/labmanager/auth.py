"""
Auth module: JWT creation/validation and the get_current_user FastAPI dependency.

Auth is optional unless AUTH_REQUIRED is set. Without a valid Authorization
header the dependency returns ANONYMOUS_ADMIN, a synthetic administrator, so
local tooling and scripts work without tokens. With AUTH_REQUIRED on, the
same request gets a 401.
"""

import time
from dataclasses import dataclass
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, Request
from labmanager.config import get_settings
from labmanager.constants import ROLE_ADMIN
from labmanager.exceptions import PermissionDeniedError
from labmanager.rbac.permissions import PermissionChecker, get_permission_checker

ALGORITHM = "HS256"


@dataclass
class UserPrincipal:
    """Resolved identity attached to each request."""
    user_id: Optional[int]
    email: str
    full_name: str
    role: str                     # "admin" | "instructor" | "lab_technician" | "student"
    is_anonymous: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


ANONYMOUS_ADMIN = UserPrincipal(
    user_id=None,
    email="anonymous",
    full_name="Admin (Anonymous)",
    role=ROLE_ADMIN,
    is_anonymous=True,
)


def create_token(user) -> str:
    """Create a signed JWT for the given User model instance."""
    settings = get_settings()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
        "exp": int(time.time()) + settings.token_expire_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[UserPrincipal]:
    """Decode and validate a JWT. Returns None if invalid/expired."""
    try:
        settings = get_settings()
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
        return UserPrincipal(
            user_id=int(payload["sub"]),
            email=payload.get("email", ""),
            full_name=payload.get("full_name", payload.get("email", "")),
            role=payload.get("role", ""),
        )
    except (JWTError, KeyError, ValueError):
        return None


async def get_current_user(request: Request) -> UserPrincipal:
    """
    FastAPI dependency. Extracts the JWT from the Authorization header.
    Falls back to ANONYMOUS_ADMIN unless AUTH_REQUIRED is on.
    """
    auth_header = request.headers.get("Authorization", "")
    principal = None
    if auth_header.startswith("Bearer "):
        principal = decode_token(auth_header[7:])
    if principal:
        return principal
    if get_settings().auth_required:
        raise HTTPException(status_code=401, detail="Missing or invalid bearer token")
    return ANONYMOUS_ADMIN


def require_permission(*permission_ids: str, any_of: bool = False):
    """Dependency factory: the caller's role must hold every listed permission (or one, with any_of)."""

    async def dependency(
        current_user: UserPrincipal = Depends(get_current_user),
        checker: PermissionChecker = Depends(get_permission_checker),
    ) -> UserPrincipal:
        if any_of:
            allowed = checker.has_any_permission(current_user.role, permission_ids)
        else:
            allowed = checker.has_all_permissions(current_user.role, permission_ids)
        if not allowed:
            raise PermissionDeniedError(current_user.role, list(permission_ids))
        return current_user

    return dependency
