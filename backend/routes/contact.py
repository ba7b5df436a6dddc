"""Contact form - delivered to the support inbox through Postmark."""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from database import database
from models import AuditAction, ContactMessage
from services.email_service import email_service, EmailDeliveryError
from utils.audit import create_audit_log
from utils.rate_limiter import rate_limiter
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["contact"])

CONTACT_MAX_ATTEMPTS = 5
CONTACT_WINDOW_MINUTES = 15
REQUIRED_FIELDS = ("name", "email", "reason", "message")


@router.post("/contact")
async def submit_contact(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    fields = {key: str(body.get(key) or "").strip() for key in REQUIRED_FIELDS}
    if not all(fields.values()):
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    allowed, error_message = await rate_limiter.check_rate_limit(
        f"contact:{fields['email'].lower()}", CONTACT_MAX_ATTEMPTS, CONTACT_WINDOW_MINUTES
    )
    if not allowed:
        return JSONResponse(status_code=429, content={"error": error_message})

    record = ContactMessage(**fields)
    db = database.get_db()
    await db.contact_messages.insert_one(record.model_dump())

    try:
        delivery = email_service.send_contact_message(**fields)
    except EmailDeliveryError as e:
        await db.contact_messages.update_one(
            {"message_id": record.message_id},
            {"$set": {"status": "failed", "error": str(e)}}
        )
        return JSONResponse(status_code=500, content={"error": str(e)})

    await db.contact_messages.update_one(
        {"message_id": record.message_id},
        {"$set": {"status": delivery["status"], "postmark_message_id": delivery["message_id"]}}
    )
    await create_audit_log(
        action=AuditAction.CONTACT_MESSAGE,
        resource_type="contact_message",
        resource_id=record.message_id,
        metadata={"reason": fields["reason"], "status": delivery["status"]},
        ip_address=request.client.host if request.client else None,
    )
    return {"message": "Email sent successfully"}
