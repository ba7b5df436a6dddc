"""Payment provider failures shared by the Razorpay and Polar services."""


class PaymentError(Exception):
    """A provider call failed or a payment request was rejected."""


class PaymentConfigurationError(PaymentError):
    """Provider credentials are missing."""


class SignatureVerificationError(PaymentError):
    """A payment or webhook signature did not match."""


def provider_error_body(message: str) -> dict:
    """Error payload returned by the payment and webhook endpoints."""
    return {"error": message, "details": "Check function logs for more information"}
