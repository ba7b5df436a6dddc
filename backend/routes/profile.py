"""Profile Routes - ToolHub
Read and edit the caller's profile. Premium fields are read-only here.
"""
from fastapi import APIRouter, HTTPException, Request, status
from middleware import require_user
from models import ProfileUpdateRequest
from services.account_service import account_service
from services.premium_service import is_premium_active
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/profile", tags=["profile"])


def _with_status(profile: dict) -> dict:
    return {**profile, "premium_active": is_premium_active(profile)}


@router.get("")
async def get_profile(request: Request):
    user = await require_user(request)
    return _with_status(user["profile"])


@router.patch("")
async def update_profile(request: Request, data: ProfileUpdateRequest):
    user = await require_user(request)
    try:
        profile = await account_service.update_profile(
            user["user_id"], data.model_dump(exclude_unset=True)
        )
        return _with_status(profile)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/refresh")
async def refresh_profile(request: Request):
    """Re-read the profile, e.g. after a payment completes in another tab."""
    user = await require_user(request)
    profile = await account_service.get_profile(user["user_id"])
    return _with_status(profile or user["profile"])
