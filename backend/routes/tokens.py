"""
Loyalty token endpoints — mint, burn, transfer, approvals, lookups.

Endpoints:
    POST /tokens/mint                  — Issue the next token (administrator)
    GET  /tokens/{token_id}            — Holder / burnt status / approval
    GET  /tokens/{token_id}/burnt      — Burnt flag only
    POST /tokens/{token_id}/burn       — Retire a token (holder or approved)
    POST /tokens/{token_id}/transfer   — Move a token (gate must be OPEN)
    POST /tokens/{token_id}/approve    — Approve one wallet for a token
    POST /tokens/operators             — Approve/revoke an operator for all tokens
    GET  /holders/{wallet}/balance     — Number of live tokens held
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from deps import get_registry, require_valid_caller
from domain.responses import success_response
from middleware.rate_limit import rate_limit
from models import (
    ApproveRequest,
    BalanceResponse,
    MintRequest,
    MintResponse,
    OperatorRequest,
    TokenResponse,
    TransferRequest,
)
from services import registry_service
from services.loyalty_registry import LoyaltyRegistry
from utils.validators import validate_wallet_address, validated_token_id, validated_wallet

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tokens", tags=["tokens"])
holders_router = APIRouter(prefix="/holders", tags=["tokens"])


# ── POST /tokens/mint ──────────────────────────────────────────────
@router.post("/mint", status_code=201)
async def mint_token(
    request: MintRequest,
    caller: str = Depends(require_valid_caller),
    registry: LoyaltyRegistry = Depends(get_registry),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=settings.mint_rate_limit, window_seconds=60)),
):
    """Issue the next identifier to `recipient`. Administrator only."""
    # standing before input format, matching the core's check order
    registry.access_control.require_administrator(caller)
    validate_wallet_address(request.recipient, field="recipient")

    token_id = await registry_service.mint(db, caller, request.recipient)

    return success_response(
        MintResponse(token_id=token_id, recipient=request.recipient).model_dump(by_alias=True)
    )


# ── POST /tokens/operators ─────────────────────────────────────────
@router.post("/operators")
async def set_operator(
    request: OperatorRequest,
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    """Approve (or revoke) `operator` for every token the caller holds."""
    validate_wallet_address(request.operator, field="operator")

    await registry_service.set_approval_for_all(db, caller, request.operator, request.approved)

    return success_response({
        "owner": caller,
        "operator": request.operator,
        "approved": request.approved,
    })


# ── GET /tokens/{token_id} ─────────────────────────────────────────
@router.get("/{token_id}")
async def get_token(token_id: int = Depends(validated_token_id)):
    """Current holder, burnt flag and single-token approval."""
    info = registry_service.token_info(token_id)
    token = TokenResponse(
        token_id=info["tokenId"],
        burnt=info["burnt"],
        holder=info["holder"],
        approved=info["approved"],
    )
    return success_response(token.model_dump(by_alias=True))


# ── GET /tokens/{token_id}/burnt ───────────────────────────────────
@router.get("/{token_id}/burnt")
async def get_token_burnt(
    token_id: int = Depends(validated_token_id),
    registry: LoyaltyRegistry = Depends(get_registry),
):
    """Burnt flag; never-minted identifiers report false."""
    return success_response({"tokenId": token_id, "burnt": registry.is_burnt(token_id)})


# ── POST /tokens/{token_id}/burn ───────────────────────────────────
@router.post("/{token_id}/burn")
async def burn_token(
    token_id: int = Depends(validated_token_id),
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Permanently retire a token.

    Caller must hold the token or be approved for it. A second burn of the
    same identifier fails with 409.
    """
    await registry_service.burn(db, caller, token_id)
    return success_response({"tokenId": token_id, "burnt": True, "caller": caller})


# ── POST /tokens/{token_id}/transfer ───────────────────────────────
@router.post("/{token_id}/transfer")
async def transfer_token(
    request: TransferRequest,
    token_id: int = Depends(validated_token_id),
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=settings.transfer_rate_limit, window_seconds=60)),
):
    """Move a token between holders. Rejected with 403 unless the gate is OPEN."""
    validate_wallet_address(request.sender, field="from")
    validate_wallet_address(request.recipient, field="to")

    await registry_service.transfer(db, caller, request.sender, request.recipient, token_id)

    return success_response({
        "tokenId": token_id,
        "from": request.sender,
        "to": request.recipient,
    })


# ── POST /tokens/{token_id}/approve ────────────────────────────────
@router.post("/{token_id}/approve")
async def approve_token(
    request: ApproveRequest,
    token_id: int = Depends(validated_token_id),
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    """Approve one wallet to transfer or burn this token (null clears it)."""
    if request.approved:
        validate_wallet_address(request.approved, field="approved")

    await registry_service.approve(db, caller, request.approved, token_id)

    return success_response({"tokenId": token_id, "approved": request.approved})


# ── GET /holders/{wallet}/balance ──────────────────────────────────
@holders_router.get("/{wallet}/balance")
async def get_balance(
    wallet: str = Depends(validated_wallet),
    registry: LoyaltyRegistry = Depends(get_registry),
):
    """Number of live (unburnt) tokens the wallet holds."""
    balance = registry.ledger.balance_of(wallet)
    return success_response(BalanceResponse(wallet=wallet, balance=balance).model_dump(by_alias=True))
