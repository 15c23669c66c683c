from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from labmanager.database import get_db
from labmanager.auth import create_token
from labmanager.services.user_service import user_service

router = APIRouter()


@router.post("/token")
async def get_token(body: dict, db: AsyncSession = Depends(get_db)):
    """
    Exchange an email for a JWT token. Demo-only: there is no credential
    check, so anyone who knows an active email (an admin's included) gets a
    token for it. Do not expose this route in a deployment that relies on
    AUTH_REQUIRED.
    Body: {"email": "admin@akbid.ac.id"}
    """
    email = (body.get("email") or "").strip()
    if not email:
        raise HTTPException(status_code=400, detail="email required")

    user = await user_service.get_active_by_email(email, db)
    if not user:
        raise HTTPException(status_code=404, detail=f"Active user '{email}' not found")

    token = create_token(user)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user_id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
    }
