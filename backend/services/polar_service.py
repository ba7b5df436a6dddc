"""
Polar Service - ToolHub
Recurring Pro subscriptions through Polar: checkout creation, subscription
verification after redirect, and webhook event handling.
"""
from database import database
from models import Subscription, PaymentProvider, SubscriptionStatus, AuditAction
from utils.audit import create_audit_log
from services.payment_errors import PaymentError, PaymentConfigurationError, SignatureVerificationError
from services.premium_service import premium_service, default_expiry, as_utc
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import hashlib
import hmac
import os
import logging
import httpx

logger = logging.getLogger(__name__)

POLAR_API_BASE = "https://api.polar.sh/v1"


def webhook_signature(secret: str, body: bytes) -> str:
    """sha256 hex of the shared secret followed by the raw body."""
    return hashlib.sha256(secret.encode() + body).hexdigest()


HANDLED_EVENTS = (
    "subscription.created", "subscription.updated",
    "subscription.cancelled", "subscription.canceled",
    "checkout.completed",
)


def _metadata_user_id(obj: Dict[str, Any]) -> Optional[str]:
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict):
        return None
    user_id = metadata.get("user_id")
    return user_id if isinstance(user_id, str) and user_id else None


class PolarService:
    def __init__(self):
        self.access_token = os.getenv("POLAR_ACCESS_TOKEN")
        self.webhook_secret = os.getenv("POLAR_WEBHOOK_SECRET")
        if not self.access_token:
            logger.warning("POLAR_ACCESS_TOKEN not set - Polar checkout will fail")

    def _get_db(self):
        return database.get_db()

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            logger.error("Polar access token not configured")
            raise PaymentConfigurationError("Polar access token not configured")
        return {"Authorization": f"Bearer {self.access_token}", "Content-Type": "application/json"}

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = self._headers()
        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    method, f"{POLAR_API_BASE}{path}", headers=headers, json=payload, timeout=15.0
                )
                data = response.json()
        except httpx.TimeoutException:
            logger.error(f"Polar API timeout: {method} {path}")
            raise PaymentError("Polar API timeout")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Polar API error: {method} {path}: {e}")
            raise PaymentError(f"Polar API error: {e}")

        if response.status_code >= 300:
            error = data.get("error") if isinstance(data, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            logger.error(f"Polar API error {response.status_code}: {data}")
            raise PaymentError(message or f"Polar API error: {response.status_code}")
        return data

    # ------------------------------------------------------------------
    # Checkout & verification
    # ------------------------------------------------------------------

    async def create_checkout(
        self,
        user: Dict[str, Any],
        price_id: str,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
        customer_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        checkout = await self._request("POST", "/checkouts", {
            "price_id": price_id,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": customer_email,
            "metadata": {"user_id": user["user_id"], "email": user.get("email")},
        })
        logger.info(f"Polar checkout created: {checkout.get('id')} for {user['user_id']}")

        subscription = Subscription(
            user_id=user["user_id"],
            provider=PaymentProvider.POLAR,
            polar_checkout_id=checkout["id"],
            amount=0,
            currency="USD",
            status=SubscriptionStatus.PENDING.value,
            expires_at=default_expiry(),
        )
        await self._get_db().subscriptions.insert_one(subscription.model_dump())
        await create_audit_log(
            action=AuditAction.PAYMENT_ORDER_CREATED,
            actor_id=user["user_id"],
            resource_type="subscription",
            resource_id=subscription.subscription_id,
            metadata={"provider": "polar", "checkout_id": checkout["id"], "price_id": price_id},
        )
        return {"checkoutUrl": checkout.get("url"), "checkoutId": checkout["id"]}

    async def verify_subscription(self, user: Dict[str, Any], subscription_id: str) -> Dict[str, Any]:
        remote = await self._request("GET", f"/subscriptions/{subscription_id}")
        status = remote.get("status")
        price = remote.get("price") or {}
        now = datetime.now(timezone.utc)

        db = self._get_db()
        updates = {
            "polar_subscription_id": subscription_id,
            "status": status,
            "amount": price.get("amount") or 0,
            "currency": (price.get("currency") or "USD").upper(),
            "updated_at": now,
        }
        result = await db.subscriptions.update_many(
            {
                "user_id": user["user_id"],
                "provider": PaymentProvider.POLAR.value,
                "$or": [
                    {"polar_subscription_id": subscription_id},
                    {"status": SubscriptionStatus.PENDING.value},
                ],
            },
            {"$set": updates}
        )
        if result.matched_count == 0:
            await db.subscriptions.insert_one(Subscription(
                user_id=user["user_id"], provider=PaymentProvider.POLAR, **updates
            ).model_dump())

        is_active = status == SubscriptionStatus.ACTIVE.value
        if is_active and remote.get("current_period_end"):
            expires_at = as_utc(remote["current_period_end"])
        else:
            expires_at = default_expiry(now)
        await premium_service.set_premium(
            user["user_id"], is_active, expires_at, source="polar_verify",
            metadata={"polar_subscription_id": subscription_id, "status": status},
        )
        await create_audit_log(
            action=AuditAction.PAYMENT_VERIFIED,
            actor_id=user["user_id"],
            metadata={"provider": "polar", "subscription_id": subscription_id, "status": status},
        )

        return {
            "success": True,
            "message": "Subscription verified and premium access updated",
            "subscription": remote,
            "premium_expires_at": expires_at.isoformat(),
        }

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> None:
        if not self.webhook_secret:
            logger.error("Polar webhook secret not configured")
            raise PaymentConfigurationError("Polar webhook secret not configured")
        if not signature:
            logger.warning("Polar webhook received without signature")
            raise SignatureVerificationError("Missing webhook signature")
        expected = webhook_signature(self.webhook_secret, body)
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            logger.warning("Invalid Polar webhook signature")
            raise SignatureVerificationError("Invalid webhook signature")

    async def handle_event(self, event: Any) -> None:
        """Apply a verified webhook event. Raises ValueError for malformed events."""
        if not isinstance(event, dict):
            raise ValueError("Webhook event must be a JSON object")
        event_type = event.get("type")
        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValueError("Webhook event data must be an object")
        if event_type in HANDLED_EVENTS and not (isinstance(data.get("id"), str) and data["id"]):
            raise ValueError(f"Webhook event {event_type} has no object id")
        logger.info(f"Polar webhook event: {event_type} {data.get('id')}")
        await create_audit_log(
            action=AuditAction.WEBHOOK_RECEIVED,
            resource_type="polar_event",
            resource_id=data.get("id"),
            metadata={"type": event_type},
        )

        if event_type in ("subscription.created", "subscription.updated"):
            await self._handle_subscription(data)
        elif event_type in ("subscription.cancelled", "subscription.canceled"):
            await self._handle_cancellation(data)
        elif event_type == "checkout.completed":
            await self._handle_checkout_completed(data)
        else:
            logger.info(f"Unhandled Polar webhook event type: {event_type}")

    async def _handle_subscription(self, subscription: Dict[str, Any]) -> None:
        user_id = _metadata_user_id(subscription)
        if not user_id:
            logger.error(f"No user_id in Polar subscription metadata: {subscription.get('id')}")
            return

        price = subscription.get("price")
        if not isinstance(price, dict):
            price = {}
        status = subscription.get("status")
        period_end = subscription.get("current_period_end")
        if period_end is not None and not isinstance(period_end, str):
            raise ValueError("Invalid current_period_end")
        expires_at = as_utc(period_end)
        now = datetime.now(timezone.utc)

        db = self._get_db()
        await db.subscriptions.update_one(
            {"polar_subscription_id": subscription["id"]},
            {
                "$set": {
                    "user_id": user_id,
                    "provider": PaymentProvider.POLAR.value,
                    "amount": price.get("amount") or 0,
                    "currency": (price.get("currency") or "USD").upper(),
                    "status": status,
                    "expires_at": expires_at,
                    "updated_at": now,
                },
                "$setOnInsert": {
                    "subscription_id": Subscription(user_id=user_id, provider=PaymentProvider.POLAR).subscription_id,
                    "created_at": now,
                },
            },
            upsert=True
        )

        await premium_service.set_premium(
            user_id, status == SubscriptionStatus.ACTIVE.value, expires_at, source="polar_webhook",
            metadata={"polar_subscription_id": subscription["id"], "status": status},
        )

    async def _handle_cancellation(self, subscription: Dict[str, Any]) -> None:
        user_id = _metadata_user_id(subscription)
        if not user_id:
            logger.error(f"No user_id in Polar subscription metadata: {subscription.get('id')}")
            return

        await self._get_db().subscriptions.update_many(
            {"polar_subscription_id": subscription.get("id")},
            {"$set": {"status": SubscriptionStatus.CANCELLED.value, "updated_at": datetime.now(timezone.utc)}}
        )
        await premium_service.revoke(
            user_id, source="polar_webhook", metadata={"polar_subscription_id": subscription.get("id")}
        )
        logger.info(f"Polar subscription cancelled for {user_id}")

    async def _handle_checkout_completed(self, checkout: Dict[str, Any]) -> None:
        user_id = _metadata_user_id(checkout)
        if not user_id:
            logger.error(f"No user_id in Polar checkout metadata: {checkout.get('id')}")
            return

        await self._get_db().subscriptions.update_many(
            {"polar_checkout_id": checkout.get("id")},
            {"$set": {"status": SubscriptionStatus.COMPLETED.value, "updated_at": datetime.now(timezone.utc)}}
        )
        logger.info(f"Polar checkout completed: {checkout.get('id')}")


polar_service = PolarService()
