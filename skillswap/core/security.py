from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt

from .config import Settings

def create_access_token(
    settings: Settings,
    user_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT shaped like a Supabase access token."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expiration_minutes)
    )
    to_encode: Dict[str, Any] = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "exp": expire,
        "user_metadata": {"name": name} if name else {},
    }
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)

def decode_access_token(settings: Settings, token: str) -> Dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        JWTError: Bad signature, wrong audience, expired or missing ``sub``
    """
    payload = jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )
    if not payload.get("sub"):
        raise JWTError("Token missing 'sub' claim")
    return payload
