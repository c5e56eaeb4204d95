"""
Pydantic models for request/response validation.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ApiBase(BaseModel):
    """Shared base; allows construction by Python name or camelCase alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Token Models ────────────────────────────────────────────────────

class MintRequest(ApiBase):
    """Administrator issues the next token to a holder."""
    recipient: str = Field(..., description="Holder wallet address", min_length=1)


class MintResponse(ApiBase):
    token_id: int = Field(..., alias="tokenId")
    recipient: str


class TransferRequest(ApiBase):
    """Move a token; only succeeds while the transferability gate is OPEN."""
    sender: str = Field(..., alias="from", description="Current holder")
    recipient: str = Field(..., alias="to", description="New holder")


class ApproveRequest(ApiBase):
    approved: Optional[str] = Field(
        default=None,
        description="Wallet allowed to move/burn this token (null clears the approval)",
    )


class OperatorRequest(ApiBase):
    operator: str = Field(..., description="Wallet to approve for all of the caller's tokens")
    approved: bool = True


class TokenResponse(ApiBase):
    token_id: int = Field(..., alias="tokenId")
    burnt: bool
    holder: Optional[str] = None
    approved: Optional[str] = None


class BalanceResponse(ApiBase):
    wallet: str
    balance: int


# ── Administration Models ───────────────────────────────────────────

class TransferableRequest(ApiBase):
    transferable: bool = Field(..., description="Administrator's transferability intent")


class AdministratorTransferRequest(ApiBase):
    new_administrator: str = Field(..., alias="newAdministrator")


class RegistryStatusResponse(ApiBase):
    administrator: str
    next_id: int = Field(..., alias="nextId")
    transferable: bool
    locked: bool
    gate_state: str = Field(..., alias="gateState")
    burnt_count: int = Field(..., alias="burntCount")
    event_count: int = Field(..., alias="eventCount")
    pending_events: int = Field(0, alias="pendingEvents")


# ── Auth Models ─────────────────────────────────────────────────────

class ChallengeRequest(ApiBase):
    wallet_address: str = Field(..., alias="walletAddress", min_length=58, max_length=58)


class ChallengeResponse(ApiBase):
    wallet_address: str = Field(..., alias="walletAddress")
    nonce: str
    expires_at: str = Field(..., alias="expiresAt")
    message: str = Field(..., description="Human-readable text shown by the wallet")


class VerifyRequest(ApiBase):
    """The signature covers the utf-8 nonce bytes, with or without the MX prefix."""
    wallet_address: str = Field(..., alias="walletAddress", min_length=58, max_length=58)
    nonce: str = Field(..., min_length=16, max_length=128)
    signature: str = Field(..., description="Base64 Ed25519 signature", min_length=16)


class VerifyResponse(ApiBase):
    wallet_address: str = Field(..., alias="walletAddress")
    role: str = Field(..., description="administrator | holder, at issue time")
    access_token: str = Field(..., alias="accessToken")
    token_type: str = Field("Bearer", alias="tokenType")
    expires_in_seconds: int = Field(..., alias="expiresInSeconds")
