"""
Premium Service - ToolHub
Derives premium access from a profile and owns every change to the premium
fields. Payment verification, webhooks and the expiry sweep go through here.
"""
from database import database
from models import AuditAction
from utils.audit import create_audit_log
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import os
import logging

logger = logging.getLogger(__name__)

PREMIUM_PERIOD_DAYS = int(os.getenv("PREMIUM_PERIOD_DAYS", "30"))


def as_utc(value) -> Optional[datetime]:
    """Normalise stored timestamps. Mongo hands back naive UTC datetimes."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def is_premium_active(profile: Optional[Dict[str, Any]], now: Optional[datetime] = None) -> bool:
    """True iff the profile is flagged premium and the flag has not expired."""
    if not profile or not profile.get("is_premium"):
        return False
    expires_at = as_utc(profile.get("premium_expires_at"))
    if expires_at is None:
        return True
    return expires_at > (now or datetime.now(timezone.utc))


def default_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.now(timezone.utc)) + timedelta(days=PREMIUM_PERIOD_DAYS)


class PremiumService:
    def _get_db(self):
        return database.get_db()

    async def set_premium(
        self,
        user_id: str,
        is_premium: bool,
        expires_at: Optional[datetime],
        source: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Write the premium fields and audit the transition. Returns the updated profile."""
        db = self._get_db()
        before = await db.profiles.find_one({"user_id": user_id}, {"_id": 0})
        if not before:
            logger.warning(f"Premium update for unknown profile {user_id} ({source})")
            return None

        now = datetime.now(timezone.utc)
        await db.profiles.update_one(
            {"user_id": user_id},
            {"$set": {
                "is_premium": is_premium,
                "premium_expires_at": expires_at,
                "updated_at": now,
            }}
        )
        after = await db.profiles.find_one({"user_id": user_id}, {"_id": 0})

        action = AuditAction.PREMIUM_GRANTED if is_premium else AuditAction.PREMIUM_REVOKED
        await create_audit_log(
            action=action,
            actor_id=user_id,
            resource_type="profile",
            resource_id=user_id,
            before_state={k: before.get(k) for k in ("is_premium", "premium_expires_at")},
            after_state={"is_premium": is_premium, "premium_expires_at": expires_at},
            metadata={"source": source, **(metadata or {})},
        )
        logger.info(f"Premium {'granted' if is_premium else 'revoked'} for {user_id} via {source}")
        return after

    async def grant(self, user_id: str, source: str, expires_at: Optional[datetime] = None,
                    metadata: Optional[Dict[str, Any]] = None):
        return await self.set_premium(user_id, True, expires_at or default_expiry(), source, metadata)

    async def revoke(self, user_id: str, source: str, metadata: Optional[Dict[str, Any]] = None):
        return await self.set_premium(user_id, False, None, source, metadata)

    async def expire_lapsed(self, now: Optional[datetime] = None) -> int:
        """Clear the premium flag on profiles whose expiry has passed."""
        db = self._get_db()
        now = now or datetime.now(timezone.utc)
        lapsed = await db.profiles.find(
            {"is_premium": True, "premium_expires_at": {"$ne": None, "$lte": now}},
            {"_id": 0, "user_id": 1, "premium_expires_at": 1}
        ).to_list(10000)

        count = 0
        for profile in lapsed:
            await db.profiles.update_one(
                {"user_id": profile["user_id"], "is_premium": True},
                {"$set": {"is_premium": False, "updated_at": now}}
            )
            await create_audit_log(
                action=AuditAction.PREMIUM_EXPIRED,
                actor_id=profile["user_id"],
                resource_type="profile",
                resource_id=profile["user_id"],
                metadata={"premium_expires_at": str(profile.get("premium_expires_at"))},
            )
            count += 1
        return count


premium_service = PremiumService()
