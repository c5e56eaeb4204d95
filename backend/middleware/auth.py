"""
Caller identity for registry operations.

Every mutating registry call takes the caller wallet explicitly; this module
works out who that caller is for an HTTP request:

  - Authorization: Bearer <jwt>  (issued by /auth/verify after a wallet
    signature over a server nonce; see routes/auth.py)
  - X-Wallet-Address: <wallet>   (legacy header, only honoured in DEMO_MODE)

Whether the caller may actually mint, burn or toggle flags is decided by the
registry itself, not here.
"""
import logging
from datetime import datetime, timezone, timedelta
from fastapi import HTTPException, Header
from typing import Optional

import jwt

from config import settings

logger = logging.getLogger(__name__)

ROLE_ADMINISTRATOR = "administrator"
ROLE_HOLDER = "holder"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def _require_secret() -> str:
    if not settings.jwt_secret:
        raise HTTPException(
            status_code=500,
            detail="Server auth misconfigured (JWT secret missing).",
        )
    return settings.jwt_secret


def decode_access_token(token: str) -> dict:
    secret = _require_secret()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Access token expired.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid access token.")


def issue_access_token(*, wallet_address: str, role: str) -> str:
    """
    The role claim is informational (shown to clients); the registry
    re-checks administrator rights on every call.
    """
    secret = _require_secret()
    now = _now_utc()
    exp = now.replace(microsecond=0) + timedelta(minutes=settings.jwt_access_ttl_minutes)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": wallet_address,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


async def get_caller(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_wallet_address: Optional[str] = Header(None, alias="X-Wallet-Address"),
) -> Optional[str]:
    """Best-effort: JWT subject, else the legacy header in demo mode, else None."""
    token = _parse_bearer_token(authorization)
    if token:
        payload = decode_access_token(token)
        return payload.get("sub")
    if x_wallet_address and settings.demo_mode:
        return x_wallet_address
    return None


async def require_caller(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    x_wallet_address: Optional[str] = Header(None, alias="X-Wallet-Address"),
) -> str:
    """FastAPI dependency for routes that mutate registry state."""
    caller = await get_caller(
        authorization=authorization,
        x_wallet_address=x_wallet_address,
    )
    if not caller:
        if x_wallet_address and not settings.demo_mode:
            logger.warning(f"Legacy header rejected outside demo mode: {x_wallet_address[:8]}...")
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Authorization: Bearer <token> (or X-Wallet-Address in demo mode).",
        )
    return caller
