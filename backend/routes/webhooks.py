"""Webhook Routes - Polar subscription events.

POST /api/webhooks/polar - verified against the polar-webhook-signature header
"""
from fastapi import APIRouter, Request, Header
from fastapi.responses import JSONResponse
from services.payment_errors import PaymentError, provider_error_body
from services.polar_service import polar_service
import json
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


@router.post("/api/webhooks/polar")
async def polar_webhook(
    request: Request,
    polar_signature: str = Header(None, alias="polar-webhook-signature"),
):
    """Handle Polar subscription and checkout events."""
    payload = await request.body()
    try:
        polar_service.verify_webhook_signature(payload, polar_signature)
        event = json.loads(payload)
        await polar_service.handle_event(event)
    except PaymentError as e:
        return JSONResponse(status_code=500, content=provider_error_body(str(e)))
    except ValueError as e:
        logger.error(f"Polar webhook payload rejected: {e}")
        return JSONResponse(status_code=500, content=provider_error_body("Invalid webhook payload"))

    return {"success": True}
