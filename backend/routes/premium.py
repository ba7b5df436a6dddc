"""Premium status and free-tier usage."""
from fastapi import APIRouter, Request
from middleware import require_user
from services.premium_service import as_utc
from services.usage_service import usage_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["premium"])


@router.get("/premium/status")
async def premium_status(request: Request):
    user = await require_user(request)
    expires_at = as_utc(user["profile"].get("premium_expires_at"))
    return {
        "is_premium": user["is_premium"],
        "premium_expires_at": expires_at.isoformat() if expires_at else None,
    }


@router.get("/usage")
async def get_usage(request: Request):
    user = await require_user(request)
    return await usage_service.get_summary(user["user_id"], user["is_premium"])
