import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .models import UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    user_id: str
    email: Optional[str]
    role: str


def _b64decode(segment: str) -> bytes:
    padding = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding if padding != 4 else ""))


def verify_access_token(token: str, secret: Optional[str] = None) -> dict:
    """
    Verify an HS256 access token issued by the managed auth service.
    Checks signature, audience, expiry and issued-at; returns the claims.
    """
    parts = token.split(".")
    if len(parts) != 3:
        logger.warning(f"⚠️ Malformed token received: {len(parts)} parts")
        raise HTTPException(status_code=401, detail="Invalid token format")

    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
    except Exception as e:
        logger.error(f"❌ Failed to decode token header: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    if header.get("alg") != "HS256":
        logger.error(f"❌ Invalid token algorithm: {header.get('alg')}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")

    try:
        signature = _b64decode(signature_b64)
    except Exception as e:
        raise HTTPException(status_code=401, detail="Invalid token signature format") from e

    signer = hmac.HMAC((secret or AUTH_JWT_SECRET).encode(), hashes.SHA256())
    signer.update(f"{header_b64}.{payload_b64}".encode())
    try:
        signer.verify(signature)
    except InvalidSignature as e:
        logger.error("❌ Token signature verification failed")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    try:
        claims = json.loads(_b64decode(payload_b64))
    except Exception as e:
        raise HTTPException(status_code=401, detail="Invalid token payload") from e

    aud = claims.get("aud")
    audiences = aud if isinstance(aud, list) else [aud]
    if AUTH_JWT_AUDIENCE not in audiences:
        logger.error("❌ Token audience mismatch")
        raise HTTPException(status_code=401, detail="Invalid token audience")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )
    if claims.get("iat", 0) > now + 60:  # 60 seconds clock skew
        logger.warning("⚠️ Token issued in the future")
        raise HTTPException(status_code=401, detail="Invalid token")

    if not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return claims


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the bearer token to a user and their role"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    claims = verify_access_token(credentials.credentials)
    user_id = claims["sub"]

    roles = [
        row.role
        for row in db.query(UserRole)
        .filter(UserRole.user_id == user_id)
        .order_by(UserRole.created_at.desc(), UserRole.id.desc())
        .all()
    ]
    # admin wins over any role granted later
    role = "admin" if "admin" in roles else (roles[0] if roles else "user")

    logger.debug(f"✅ User authenticated: {claims.get('email')} ({role})")
    return CurrentUser(user_id=user_id, email=claims.get("email"), role=role)


async def get_current_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency for every admin-only route"""
    if user.role != "admin":
        logger.warning(f"⚠️ User {user.email} attempted to access admin route without admin role")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
