"""
Password hashing, session tokens and password reset tokens for ToolHub accounts.
"""
from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Tuple
import os
import secrets
import hashlib

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
RESET_TOKEN_TTL = timedelta(hours=1)

# Tokens without this claim were not issued by this API
TOKEN_PRODUCT = "toolhub"

PASSWORD_RULES = (
    (lambda p: len(p) >= 8, "Password must be at least 8 characters"),
    (lambda p: any(c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one number"),
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def ensure_strong_password(password: str) -> None:
    """Raise ValueError naming the first rule the password breaks."""
    for rule, message in PASSWORD_RULES:
        if not rule(password or ""):
            raise ValueError(message)


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token stamped with the product claim."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=JWT_EXPIRATION_HOURS))
    to_encode.update({"exp": expire, "product": TOKEN_PRODUCT})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_session_token(user_id: str, email: str) -> str:
    return create_access_token({"sub": user_id, "email": email})


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a JWT token. Expired or foreign tokens give None."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("product") != TOKEN_PRODUCT:
        return None
    return payload


def hash_token(token: str) -> str:
    """Reset tokens are stored as their SHA-256 only."""
    return hashlib.sha256(token.encode()).hexdigest()


def issue_reset_token(now: Optional[datetime] = None) -> Tuple[str, str, datetime]:
    """Returns (token for the email link, hash to store, expiry)."""
    token = secrets.token_urlsafe(32)
    now = now or datetime.now(timezone.utc)
    return token, hash_token(token), now + RESET_TOKEN_TTL
