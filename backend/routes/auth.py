"""
Auth endpoints — wallet signature challenge/verify.

Flow:
  1) POST /auth/challenge  -> {nonce, expiresAt, message}
  2) Client signs the nonce bytes with its wallet
  3) POST /auth/verify     -> verifies signature, returns JWT access token
"""

import logging
import base64
import binascii
import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import AuthChallenge
from models import ChallengeRequest, ChallengeResponse, VerifyRequest, VerifyResponse
from middleware.auth import ROLE_ADMINISTRATOR, ROLE_HOLDER, issue_access_token
from middleware.rate_limit import rate_limit
from services import registry_service
from utils.validators import validate_wallet_address

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _now_utc() -> datetime:
    # naive UTC, matching the DateTime columns in db_models
    return datetime.utcnow()


def _signature_valid(wallet_address: str, nonce: str, signature_b64: str) -> bool:
    try:
        sig_bytes = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Signature must be base64 encoded.")
    if len(sig_bytes) != 64:
        return False

    from algosdk import util as algo_util

    # verify_bytes prepends b"MX" (wallet signData convention); takes base64
    if algo_util.verify_bytes(nonce.encode("utf-8"), signature_b64, wallet_address):
        return True

    # Raw Ed25519 over the nonce, no prefix
    from algosdk import encoding
    from nacl.exceptions import BadSignatureError
    from nacl.signing import VerifyKey

    try:
        VerifyKey(encoding.decode_address(wallet_address)).verify(nonce.encode("utf-8"), sig_bytes)
        return True
    except (BadSignatureError, ValueError) as e:
        logger.warning(f"Raw Ed25519 verification failed: {e}")
        return False


@router.post("/challenge", response_model=ChallengeResponse)
async def create_challenge(
    request: ChallengeRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=settings.auth_rate_limit, window_seconds=60)),
):
    validate_wallet_address(request.wallet_address)

    nonce = secrets.token_urlsafe(32)[:64]
    now = _now_utc()
    expires_at = now + timedelta(minutes=settings.auth_challenge_ttl_minutes)

    db.add(
        AuthChallenge(
            wallet_address=request.wallet_address,
            nonce=nonce,
            expires_at=expires_at,
        )
    )
    await db.commit()

    message = (
        "Loyalty registry authentication\n"
        f"Wallet: {request.wallet_address}\n"
        f"Nonce: {nonce}\n"
        f"ExpiresAt: {expires_at.isoformat()}\n"
    )

    return ChallengeResponse(
        walletAddress=request.wallet_address,
        nonce=nonce,
        expiresAt=expires_at.isoformat(),
        message=message,
    )


@router.post("/verify", response_model=VerifyResponse)
async def verify_challenge(
    request: VerifyRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=settings.auth_rate_limit, window_seconds=60)),
):
    validate_wallet_address(request.wallet_address)

    q = await db.execute(
        select(AuthChallenge)
        .where(
            AuthChallenge.wallet_address == request.wallet_address,
            AuthChallenge.nonce == request.nonce,
            AuthChallenge.used_at.is_(None),
        )
        .order_by(desc(AuthChallenge.created_at))
        .limit(1)
    )
    challenge = q.scalar_one_or_none()
    if not challenge:
        raise HTTPException(status_code=400, detail="Invalid or already-used nonce.")

    now = _now_utc()
    if challenge.expires_at <= now:
        raise HTTPException(status_code=400, detail="Nonce expired. Request a new challenge.")

    if settings.demo_mode:
        logger.info(f"DEMO MODE: skipping signature verification for {request.wallet_address[:8]}...")
        ok = True
    else:
        ok = _signature_valid(request.wallet_address, request.nonce, request.signature)

    if not ok:
        raise HTTPException(status_code=401, detail="Invalid signature for wallet.")

    challenge.used_at = now

    registry = registry_service.get_registry()
    role = ROLE_ADMINISTRATOR if registry.access_control.is_administrator(request.wallet_address) else ROLE_HOLDER

    token = issue_access_token(wallet_address=request.wallet_address, role=role)
    await db.commit()

    return VerifyResponse(
        walletAddress=request.wallet_address,
        role=role,
        accessToken=token,
        expiresInSeconds=settings.jwt_access_ttl_minutes * 60,
    )
