"""
Usage Service - ToolHub
Free-tier quota: a fixed number of tool runs per calendar month (UTC).
One `tool_usage` row per user per month; a new month starts a fresh row.
"""
from database import database
from models import UsageSummary
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import os
import logging

logger = logging.getLogger(__name__)

MONTHLY_FREE_LIMIT = int(os.getenv("MONTHLY_FREE_LIMIT", "10"))


class UsageLimitExceededError(Exception):
    def __init__(self, limit: int = MONTHLY_FREE_LIMIT):
        self.limit = limit
        super().__init__(
            f"You've used all {limit} free tool uses this month. Upgrade to Premium for unlimited access."
        )


def month_key(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m")


class UsageService:
    def __init__(self, monthly_limit: int = MONTHLY_FREE_LIMIT):
        self.monthly_limit = monthly_limit

    def _get_db(self):
        return database.get_db()

    async def get_record(self, user_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Current month's record, or an empty one."""
        db = self._get_db()
        month = month_key(now)
        record = await db.tool_usage.find_one({"user_id": user_id, "month": month}, {"_id": 0})
        if not record:
            return {"user_id": user_id, "month": month, "tools_used": 0, "last_used": None, "used_tools": []}
        return record

    def _remaining(self, record: Dict[str, Any], premium: bool) -> Optional[int]:
        if premium:
            return None
        return max(0, self.monthly_limit - record.get("tools_used", 0))

    async def can_use_tool(self, user_id: str, premium: bool) -> bool:
        if premium:
            return True
        record = await self.get_record(user_id)
        return record.get("tools_used", 0) < self.monthly_limit

    async def track_tool_usage(self, user_id: str, tool_slug: str, premium: bool) -> bool:
        """Count one run against the free quota. Premium runs are not counted.

        The increment only applies while the month is under the limit, so
        concurrent runs cannot push `tools_used` past it. Returns False when
        the quota was already used up.
        """
        if premium:
            return True

        db = self._get_db()
        now = datetime.now(timezone.utc)
        key = {"user_id": user_id, "month": month_key(now)}
        try:
            await db.tool_usage.update_one(
                key,
                {"$setOnInsert": {"tools_used": 0, "last_used": None, "used_tools": []}},
                upsert=True
            )
        except DuplicateKeyError:
            # Another request created this month's row first
            pass

        result = await db.tool_usage.update_one(
            {**key, "tools_used": {"$lt": self.monthly_limit}},
            {
                "$inc": {"tools_used": 1},
                "$set": {"last_used": now},
                "$addToSet": {"used_tools": tool_slug},
            }
        )
        if result.matched_count == 0:
            logger.warning(f"Usage limit reached while recording {tool_slug} for {user_id}")
            return False
        return True

    async def get_remaining_uses(self, user_id: str, premium: bool) -> Optional[int]:
        """None means unlimited."""
        if premium:
            return None
        return self._remaining(await self.get_record(user_id), premium)

    async def get_summary(self, user_id: str, premium: bool) -> Dict[str, Any]:
        record = await self.get_record(user_id)
        return UsageSummary(
            month=record["month"],
            tools_used=record.get("tools_used", 0),
            last_used=record.get("last_used"),
            used_tools=record.get("used_tools", []),
            monthly_limit=self.monthly_limit,
            remaining=self._remaining(record, premium),
            is_premium=premium,
        ).model_dump(mode="json")


usage_service = UsageService()
