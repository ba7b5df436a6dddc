"""Payment Routes - ToolHub

Razorpay one-off orders and Polar subscriptions. Every failure, including a
bad signature, answers 500 with {"error", "details"} so the checkout UI has a
single error shape to handle.
"""
from fastapi import APIRouter, Request, Query
from fastapi.responses import JSONResponse
from database import database
from middleware import require_auth
from models import RazorpayOrderRequest, RazorpayVerifyRequest, PolarCheckoutRequest, PolarVerifyRequest
from services.payment_errors import PaymentError, provider_error_body
from services.razorpay_service import razorpay_service
from services.polar_service import polar_service
from services.pricing import get_pricing
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["payments"])


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content=provider_error_body(message))


@router.post("/payments/razorpay/order")
async def create_razorpay_order(request: Request, data: RazorpayOrderRequest):
    user = await require_auth(request)
    try:
        return await razorpay_service.create_order(user, data.amount, data.currency)
    except PaymentError as e:
        logger.error(f"Razorpay order failed for {user['user_id']}: {e}")
        return _error_response(str(e))


@router.post("/payments/razorpay/verify")
async def verify_razorpay_payment(request: Request, data: RazorpayVerifyRequest):
    user = await require_auth(request)
    try:
        return await razorpay_service.verify_payment(
            user, data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature
        )
    except PaymentError as e:
        logger.error(f"Razorpay verification failed for {user['user_id']}: {e}")
        return _error_response(str(e))


@router.post("/payments/polar/checkout")
async def create_polar_checkout(request: Request, data: PolarCheckoutRequest):
    user = await require_auth(request)
    try:
        return await polar_service.create_checkout(
            user,
            price_id=data.priceId,
            success_url=data.successUrl,
            cancel_url=data.cancelUrl,
            customer_email=data.customerEmail or user.get("email"),
        )
    except PaymentError as e:
        logger.error(f"Polar checkout failed for {user['user_id']}: {e}")
        return _error_response(str(e))


@router.post("/payments/polar/verify")
async def verify_polar_subscription(request: Request, data: PolarVerifyRequest):
    user = await require_auth(request)
    try:
        return await polar_service.verify_subscription(user, data.subscriptionId)
    except PaymentError as e:
        logger.error(f"Polar verification failed for {user['user_id']}: {e}")
        return _error_response(str(e))


@router.get("/payments/subscriptions")
async def list_subscriptions(request: Request):
    user = await require_auth(request)
    db = database.get_db()
    subscriptions = await db.subscriptions.find(
        {"user_id": user["user_id"]},
        {"_id": 0}
    ).sort("created_at", -1).to_list(100)
    return {"subscriptions": subscriptions}


@router.get("/pricing")
async def pricing(country: Optional[str] = Query(None), annual: bool = Query(False)):
    """Public regional price list."""
    return get_pricing(country, annual)
