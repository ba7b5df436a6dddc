"""
Razorpay Service - ToolHub
One-off Pro purchases through Razorpay Orders. The order is created here,
the browser completes checkout, and verify_payment checks the HMAC signature
before granting premium.
"""
from database import database
from models import Subscription, PaymentProvider, SubscriptionStatus, AuditAction
from utils.audit import create_audit_log
from services.payment_errors import PaymentError, PaymentConfigurationError, SignatureVerificationError
from services.premium_service import premium_service, default_expiry
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import hashlib
import hmac
import os
import time
import logging
import httpx

logger = logging.getLogger(__name__)

RAZORPAY_API_BASE = "https://api.razorpay.com/v1"
ZERO_DECIMAL_CURRENCIES = ("JPY", "KRW", "VND", "CLP")
# Small INR amounts are prices quoted in USD
USD_TO_INR = 83


def to_smallest_unit(amount: float, currency: str) -> int:
    multiplier = 1 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 100
    if currency.upper() == "INR" and amount < 100:
        amount = amount * USD_TO_INR
    return int(round(amount * multiplier))


def payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class RazorpayService:
    def __init__(self):
        self.key_id = os.getenv("RAZORPAY_KEY_ID")
        self.key_secret = os.getenv("RAZORPAY_KEY_SECRET")
        if not self.key_id or not self.key_secret:
            logger.warning("Razorpay credentials not set - order creation will fail")

    def _get_db(self):
        return database.get_db()

    def _require_credentials(self):
        if not self.key_id or not self.key_secret:
            logger.error("Razorpay credentials not configured")
            raise PaymentConfigurationError("Razorpay credentials not configured")

    async def create_order(self, user: Dict[str, Any], amount: Optional[float], currency: str = "INR") -> Dict[str, Any]:
        self._require_credentials()
        if not amount or amount <= 0:
            raise PaymentError("Invalid amount provided")

        currency = (currency or "INR").upper()
        razorpay_amount = to_smallest_unit(amount, currency)
        order_data = {
            "amount": razorpay_amount,
            "currency": currency,
            "receipt": f"receipt_{int(time.time() * 1000)}_{user['user_id'][-8:]}",
            "notes": {"user_id": user["user_id"], "email": user.get("email")},
        }
        logger.info(
            f"Creating Razorpay order for {user['user_id']}: {razorpay_amount} {currency} "
            f"(key {self.key_id[:8]}...)"
        )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{RAZORPAY_API_BASE}/orders",
                    json=order_data,
                    auth=(self.key_id, self.key_secret),
                    timeout=15.0,
                )
                order = response.json()
        except httpx.TimeoutException:
            logger.error("Razorpay API timeout")
            raise PaymentError("Razorpay API timeout")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Razorpay API error: {e}")
            raise PaymentError(f"Razorpay API error: {e}")

        if response.status_code >= 300:
            description = (order.get("error") or {}).get("description") if isinstance(order, dict) else None
            logger.error(f"Razorpay API error {response.status_code}: {description}")
            raise PaymentError(description or f"Razorpay API error: {response.status_code}")

        subscription = Subscription(
            user_id=user["user_id"],
            provider=PaymentProvider.RAZORPAY,
            razorpay_order_id=order["id"],
            amount=razorpay_amount,
            currency=currency,
            status=SubscriptionStatus.PENDING.value,
            expires_at=default_expiry(),
        )
        db = self._get_db()
        await db.subscriptions.insert_one(subscription.model_dump())

        await create_audit_log(
            action=AuditAction.PAYMENT_ORDER_CREATED,
            actor_id=user["user_id"],
            resource_type="subscription",
            resource_id=subscription.subscription_id,
            metadata={"provider": "razorpay", "order_id": order["id"], "amount": razorpay_amount, "currency": currency},
        )
        logger.info(f"Razorpay order created: {order['id']}")

        return {
            "orderId": order["id"],
            "amount": order.get("amount", razorpay_amount),
            "currency": order.get("currency", currency),
            "keyId": self.key_id,
        }

    async def verify_payment(self, user: Dict[str, Any], order_id: str, payment_id: str, signature: str) -> Dict[str, Any]:
        if not self.key_secret:
            logger.error("Razorpay secret not configured")
            raise PaymentConfigurationError("Razorpay secret not configured")

        expected = payment_signature(order_id, payment_id, self.key_secret)
        if not hmac.compare_digest(expected.encode(), (signature or "").encode()):
            logger.warning(f"Invalid Razorpay signature for order {order_id} (user {user['user_id']})")
            await create_audit_log(
                action=AuditAction.PAYMENT_SIGNATURE_INVALID,
                actor_id=user["user_id"],
                metadata={"provider": "razorpay", "order_id": order_id},
            )
            raise SignatureVerificationError("Invalid payment signature")

        db = self._get_db()
        now = datetime.now(timezone.utc)
        # Claim the pending order; a replayed signature finds nothing to claim
        claimed = await db.subscriptions.update_one(
            {
                "razorpay_order_id": order_id,
                "user_id": user["user_id"],
                "status": SubscriptionStatus.PENDING.value,
            },
            {"$set": {
                "razorpay_payment_id": payment_id,
                "status": SubscriptionStatus.COMPLETED.value,
                "updated_at": now,
            }}
        )
        if claimed.matched_count == 0:
            logger.warning(f"Razorpay order {order_id} not pending for user {user['user_id']}")
            raise PaymentError("Order not found or already verified")

        expires_at = default_expiry(now)
        profile = await premium_service.grant(
            user["user_id"],
            source="razorpay",
            expires_at=expires_at,
            metadata={"order_id": order_id, "payment_id": payment_id},
        )
        await create_audit_log(
            action=AuditAction.PAYMENT_VERIFIED,
            actor_id=user["user_id"],
            metadata={"provider": "razorpay", "order_id": order_id, "payment_id": payment_id},
        )
        logger.info(f"Razorpay payment verified: {payment_id} for order {order_id}")

        return {
            "success": True,
            "message": "Payment verified and premium access granted",
            "premium_expires_at": expires_at.isoformat(),
            "profile": profile,
        }


razorpay_service = RazorpayService()
