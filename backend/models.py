from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from enum import Enum
import uuid

# ============================================================================
# ENUMS (System Constants)
# ============================================================================

class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    ABANDONED = "abandoned"

class PaymentProvider(str, Enum):
    RAZORPAY = "razorpay"
    POLAR = "polar"

class ExportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"
    JSON = "json"
    SVG = "svg"

class AuditAction(str, Enum):
    USER_SIGNUP = "USER_SIGNUP"
    USER_LOGIN = "USER_LOGIN"
    USER_LOGIN_FAILED = "USER_LOGIN_FAILED"
    PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    PROFILE_UPDATED = "PROFILE_UPDATED"
    PREMIUM_GATE_DENIED = "PREMIUM_GATE_DENIED"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED"
    PAYMENT_ORDER_CREATED = "PAYMENT_ORDER_CREATED"
    PAYMENT_VERIFIED = "PAYMENT_VERIFIED"
    PAYMENT_SIGNATURE_INVALID = "PAYMENT_SIGNATURE_INVALID"
    PREMIUM_GRANTED = "PREMIUM_GRANTED"
    PREMIUM_REVOKED = "PREMIUM_REVOKED"
    PREMIUM_EXPIRED = "PREMIUM_EXPIRED"
    WEBHOOK_RECEIVED = "WEBHOOK_RECEIVED"
    CONTACT_MESSAGE = "CONTACT_MESSAGE"

# ============================================================================
# ACCOUNTS & PROFILES
# ============================================================================

class User(BaseModel):
    """Account credentials. Profile data lives in `profiles`."""
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(default_factory=lambda: f"USR-{uuid.uuid4().hex[:12].upper()}")
    email: EmailStr
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: Optional[datetime] = None

class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    email: EmailStr
    username: Optional[str] = None
    is_premium: bool = False
    premium_expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    username: Optional[str] = None

class SignInRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: Profile

class PasswordResetRequest(BaseModel):
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

class PasswordUpdateRequest(BaseModel):
    new_password: str

class ProfileUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: Optional[str] = Field(default=None, max_length=50)

# ============================================================================
# USAGE
# ============================================================================

class UsageSummary(BaseModel):
    month: str
    tools_used: int
    last_used: Optional[datetime] = None
    used_tools: List[str]
    monthly_limit: int
    remaining: Optional[int] = None  # None means unlimited
    is_premium: bool

# ============================================================================
# SUBSCRIPTIONS & PAYMENTS
# ============================================================================

class Subscription(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subscription_id: str = Field(default_factory=lambda: f"SUB-{uuid.uuid4().hex[:12].upper()}")
    user_id: str
    provider: PaymentProvider
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    polar_checkout_id: Optional[str] = None
    polar_subscription_id: Optional[str] = None
    amount: int = 0  # Smallest currency unit
    currency: str = "USD"
    status: str = SubscriptionStatus.PENDING.value
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class RazorpayOrderRequest(BaseModel):
    amount: Optional[float] = None
    currency: str = "INR"

class RazorpayVerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

class PolarCheckoutRequest(BaseModel):
    priceId: str
    successUrl: Optional[str] = None
    cancelUrl: Optional[str] = None
    customerEmail: Optional[EmailStr] = None

class PolarVerifyRequest(BaseModel):
    subscriptionId: str

# ============================================================================
# TOOLS
# ============================================================================

class ToolRunRequest(BaseModel):
    inputs: Dict[str, Any] = Field(default_factory=dict)

# ============================================================================
# CONTACT
# ============================================================================

class ContactMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: str
    reason: str
    message: str
    status: str = "queued"
    postmark_message_id: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# ============================================================================
# AUDIT
# ============================================================================

class AuditLog(BaseModel):
    model_config = ConfigDict(extra="ignore")

    audit_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    action: AuditAction
    actor_id: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    before_state: Optional[Dict[str, Any]] = None
    after_state: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
