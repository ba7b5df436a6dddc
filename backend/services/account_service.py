"""
Account Service - ToolHub
Sign-up, sign-in, password management and profile updates.
Raises ValueError for anything the caller should see as a 400/401.
"""
from database import database
from models import User, Profile, AuditAction
from auth import (
    hash_password, verify_password, create_session_token,
    ensure_strong_password, hash_token, issue_reset_token,
)
from utils.audit import create_audit_log
from services.email_service import email_service, EmailDeliveryError
from services.premium_service import as_utc
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
import logging

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already registered. Please sign in or use a different email."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# Only these profile fields are user-editable
EDITABLE_PROFILE_FIELDS = ("username",)


class AuthenticationError(ValueError):
    """Credentials or token rejected; routes answer 401."""


class AccountService:
    def _get_db(self):
        return database.get_db()

    async def sign_up(self, email: str, password: str, username: Optional[str] = None,
                      ip_address: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        db = self._get_db()
        email = email.strip().lower()

        ensure_strong_password(password)

        if await db.users.find_one({"email": email}, {"_id": 0, "user_id": 1}):
            raise ValueError(DUPLICATE_EMAIL_MESSAGE)

        user = User(email=email, password_hash=hash_password(password))
        try:
            await db.users.insert_one(user.model_dump())
        except DuplicateKeyError:
            raise ValueError(DUPLICATE_EMAIL_MESSAGE)

        profile = Profile(user_id=user.user_id, email=email, username=(username or "").strip() or None)
        await db.profiles.insert_one(profile.model_dump())

        await create_audit_log(
            action=AuditAction.USER_SIGNUP,
            actor_id=user.user_id,
            resource_type="user",
            resource_id=user.user_id,
            ip_address=ip_address,
        )
        logger.info(f"New account created: {user.user_id}")
        return create_session_token(user.user_id, email), profile.model_dump()

    async def sign_in(self, email: str, password: str,
                      ip_address: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        db = self._get_db()
        email = email.strip().lower()

        user = await db.users.find_one({"email": email}, {"_id": 0})
        if not user or not verify_password(password, user["password_hash"]):
            await create_audit_log(
                action=AuditAction.USER_LOGIN_FAILED,
                actor_id=user["user_id"] if user else None,
                metadata={"email": email, "reason": "user_not_found" if not user else "invalid_password"},
                ip_address=ip_address,
            )
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        now = datetime.now(timezone.utc)
        await db.users.update_one({"user_id": user["user_id"]}, {"$set": {"last_login_at": now}})
        profile = await self.get_profile(user["user_id"])

        await create_audit_log(action=AuditAction.USER_LOGIN, actor_id=user["user_id"], ip_address=ip_address)
        return create_session_token(user["user_id"], user["email"]), profile

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        db = self._get_db()
        return await db.users.find_one({"user_id": user_id}, {"_id": 0, "password_hash": 0})

    async def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        db = self._get_db()
        return await db.profiles.find_one({"user_id": user_id}, {"_id": 0})

    async def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        db = self._get_db()
        before = await self.get_profile(user_id)
        if not before:
            raise ValueError("Profile not found")

        changes = {k: v for k, v in updates.items() if k in EDITABLE_PROFILE_FIELDS}
        if "username" in changes:
            changes["username"] = (changes["username"] or "").strip() or None
        if not changes:
            return before

        changes["updated_at"] = datetime.now(timezone.utc)
        await db.profiles.update_one({"user_id": user_id}, {"$set": changes})
        after = await self.get_profile(user_id)

        await create_audit_log(
            action=AuditAction.PROFILE_UPDATED,
            actor_id=user_id,
            resource_type="profile",
            resource_id=user_id,
            before_state={k: before.get(k) for k in EDITABLE_PROFILE_FIELDS},
            after_state={k: after.get(k) for k in EDITABLE_PROFILE_FIELDS},
        )
        return after

    async def request_password_reset(self, email: str) -> None:
        """Always succeeds from the caller's point of view."""
        db = self._get_db()
        email = email.strip().lower()
        user = await db.users.find_one({"email": email}, {"_id": 0, "user_id": 1, "email": 1})
        if not user:
            logger.info("Password reset requested for unknown email")
            return

        now = datetime.now(timezone.utc)
        token, token_hash, expires_at = issue_reset_token(now)
        await db.password_resets.insert_one({
            "user_id": user["user_id"],
            "token_hash": token_hash,
            "expires_at": expires_at,
            "used": False,
            "created_at": now,
        })
        await create_audit_log(action=AuditAction.PASSWORD_RESET_REQUESTED, actor_id=user["user_id"])

        try:
            email_service.send_password_reset(user["email"], token)
        except EmailDeliveryError as e:
            # The reset row stays valid; the user can ask again
            logger.error(f"Password reset email failed for {user['user_id']}: {e}")

    async def reset_password(self, token: str, new_password: str) -> None:
        db = self._get_db()
        ensure_strong_password(new_password)

        now = datetime.now(timezone.utc)
        reset = await db.password_resets.find_one({"token_hash": hash_token(token), "used": False}, {"_id": 0})
        if not reset or as_utc(reset["expires_at"]) <= now:
            raise ValueError("Invalid or expired reset token")

        # Single use: claim the token before changing the password
        claimed = await db.password_resets.update_one(
            {"token_hash": reset["token_hash"], "used": False},
            {"$set": {"used": True, "used_at": now}}
        )
        if claimed.modified_count == 0:
            raise ValueError("Invalid or expired reset token")

        await self._set_password(reset["user_id"], new_password, source="reset")

    async def update_password(self, user_id: str, new_password: str) -> None:
        ensure_strong_password(new_password)
        await self._set_password(user_id, new_password, source="update")

    async def _set_password(self, user_id: str, new_password: str, source: str) -> None:
        db = self._get_db()
        await db.users.update_one(
            {"user_id": user_id},
            {"$set": {"password_hash": hash_password(new_password), "updated_at": datetime.now(timezone.utc)}}
        )
        await create_audit_log(action=AuditAction.PASSWORD_CHANGED, actor_id=user_id, metadata={"source": source})
        logger.info(f"Password changed for {user_id} ({source})")


account_service = AccountService()
