from fastapi import Request, HTTPException, status
from functools import wraps
from typing import Optional, Dict, Any
import logging
from auth import decode_access_token
from database import database
from services.premium_service import is_premium_active
from tools.inputs import premium_message

logger = logging.getLogger(__name__)

async def get_current_user(request: Request) -> Optional[dict]:
    """Extract and validate current user from JWT token."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header.split(" ")[1]
    payload = decode_access_token(token)

    if not payload or not payload.get("sub"):
        return None

    return {"user_id": payload["sub"], "email": payload.get("email")}

async def require_auth(request: Request) -> dict:
    """Require valid authentication."""
    user = await get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user

async def require_user(request: Request) -> Dict[str, Any]:
    """Require authentication and load the caller's profile.

    Returns the token claims plus `profile` and the derived `is_premium`.
    """
    user = await require_auth(request)
    db = database.get_db()

    profile = await db.profiles.find_one({"user_id": user["user_id"]}, {"_id": 0})
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    user["profile"] = profile
    user["is_premium"] = is_premium_active(profile)
    request.state.user = user
    return user

async def log_premium_denied(user: Dict[str, Any], path: str, feature: str):
    """Log premium gate denial for audit."""
    from utils.audit import create_audit_log
    from models import AuditAction

    logger.warning(f"Premium gate denied: user={user['user_id']} feature={feature} path={path}")
    await create_audit_log(
        action=AuditAction.PREMIUM_GATE_DENIED,
        actor_id=user["user_id"],
        metadata={
            "path": path,
            "feature": feature,
        }
    )

async def enforce_premium(request: Request, user: Dict[str, Any], feature: str):
    """Raise 403 unless the caller currently holds premium access."""
    if user.get("is_premium"):
        return
    await log_premium_denied(user, str(request.url.path), feature)
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=premium_message(feature)
    )

def require_premium(feature: str):
    """
    Decorator for premium-only endpoints.

    Usage:
        @router.post("/endpoint")
        @require_premium("export")
        async def my_endpoint(request: Request):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(request: Request, *args, **kwargs):
            user = getattr(request.state, "user", None) or await require_user(request)
            await enforce_premium(request, user, feature)
            return await func(request, *args, **kwargs)

        return wrapper
    return decorator
