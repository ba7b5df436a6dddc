from postmarker.core import PostmarkClient
from html import escape
import os
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

# Verified sender in Postmark
DEFAULT_SENDER = os.getenv("EMAIL_SENDER", "noreply@toolhub.app")
CONTACT_RECIPIENT = os.getenv("CONTACT_RECIPIENT", "support@toolhub.app")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")


class EmailDeliveryError(Exception):
    """Postmark rejected or failed to accept a message."""


class EmailService:
    def __init__(self):
        postmark_token = os.getenv("POSTMARK_SERVER_TOKEN")
        if not postmark_token:
            logger.warning("POSTMARK_SERVER_TOKEN not set - emails will be logged but not sent")
            self.client = None
        else:
            self.client = PostmarkClient(server_token=postmark_token)
            logger.info("Postmark email client initialized")

    def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        text_body: str,
        tag: str,
        reply_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Send one message. Returns {"status", "message_id"}.

        Without a Postmark token the message is logged and reported as "logged".
        Raises EmailDeliveryError when Postmark fails.
        """
        if not self.client:
            logger.info(f"[email not sent] to={recipient} subject={subject!r} tag={tag}")
            return {"status": "logged", "message_id": None}

        kwargs = {}
        if reply_to:
            kwargs["ReplyTo"] = reply_to
        try:
            response = self.client.emails.send(
                From=DEFAULT_SENDER,
                To=recipient,
                Subject=subject,
                HtmlBody=html_body,
                TextBody=text_body,
                Tag=tag,
                **kwargs
            )
        except Exception as e:
            logger.error(f"Failed to send {tag} email to {recipient}: {e}")
            raise EmailDeliveryError(str(e))

        logger.info(f"Email sent: {tag} to {recipient}")
        return {"status": "sent", "message_id": response.get("MessageID")}

    def send_contact_message(self, name: str, email: str, reason: str, message: str) -> Dict[str, Any]:
        fields = [("Name", name), ("Email", email), ("Reason", reason), ("Message", message)]
        html_body = "<h2>New Contact Form Submission</h2>" + "".join(
            f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in fields
        )
        text_body = "\n".join(f"{label}: {value}" for label, value in fields)
        return self.send(
            recipient=CONTACT_RECIPIENT,
            subject=f"Contact Us - {reason}",
            html_body=html_body,
            text_body=text_body,
            tag="contact",
            reply_to=email,
        )

    def send_password_reset(self, recipient: str, token: str) -> Dict[str, Any]:
        link = f"{FRONTEND_URL.rstrip('/')}/reset-password?token={token}"
        html_body = (
            "<h2>Reset your ToolHub password</h2>"
            "<p>We received a request to reset your password. The link below is valid for one hour.</p>"
            f'<p><a href="{escape(link)}">Reset password</a></p>'
            "<p>If you did not request this, you can ignore this email.</p>"
        )
        text_body = (
            "We received a request to reset your ToolHub password.\n"
            f"Open this link within one hour: {link}\n"
            "If you did not request this, you can ignore this email."
        )
        return self.send(recipient, "Reset your ToolHub password", html_body, text_body, tag="password-reset")


email_service = EmailService()
