from fastapi import APIRouter, HTTPException, Request, status
from models import (
    SignUpRequest, SignInRequest, TokenResponse,
    PasswordResetRequest, PasswordResetConfirm, PasswordUpdateRequest,
)
from middleware import require_auth, require_user
from services.account_service import account_service, AuthenticationError
from utils.rate_limiter import rate_limiter
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

# Reset requests per email address
RESET_MAX_ATTEMPTS = 3
RESET_WINDOW_MINUTES = 60


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: Request, data: SignUpRequest):
    """Create an account and its free profile."""
    try:
        token, profile = await account_service.sign_up(
            data.email, data.password, data.username, ip_address=_client_ip(request)
        )
        return TokenResponse(access_token=token, profile=profile)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Sign up error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Sign up failed"
        )


@router.post("/signin", response_model=TokenResponse)
async def sign_in(request: Request, credentials: SignInRequest):
    try:
        token, profile = await account_service.sign_in(
            credentials.email, credentials.password, ip_address=_client_ip(request)
        )
        return TokenResponse(access_token=token, profile=profile)
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except Exception as e:
        logger.error(f"Sign in error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Sign in failed"
        )


@router.post("/signout")
async def sign_out(request: Request):
    """Tokens are stateless; the client discards its copy."""
    await require_auth(request)
    return {"success": True}


@router.get("/me")
async def get_me(request: Request):
    user = await require_user(request)
    account = await account_service.get_user(user["user_id"])
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return {
        "user": account,
        "profile": user["profile"],
        "is_premium": user["is_premium"],
    }


@router.post("/password-reset/request")
async def request_password_reset(data: PasswordResetRequest):
    """Always answers success so the endpoint does not reveal which emails have accounts."""
    allowed, _ = await rate_limiter.check_rate_limit(
        f"password_reset:{data.email.lower()}", RESET_MAX_ATTEMPTS, RESET_WINDOW_MINUTES
    )
    if allowed:
        try:
            await account_service.request_password_reset(data.email)
        except Exception as e:
            logger.error(f"Password reset request error: {e}")
    return {
        "success": True,
        "message": "If an account exists for this email, a reset link has been sent."
    }


@router.post("/password-reset/confirm")
async def confirm_password_reset(data: PasswordResetConfirm):
    try:
        await account_service.reset_password(data.token, data.new_password)
        return {"success": True, "message": "Password updated"}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/password")
async def update_password(request: Request, data: PasswordUpdateRequest):
    user = await require_auth(request)
    try:
        await account_service.update_password(user["user_id"], data.new_password)
        return {"success": True, "message": "Password updated"}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
