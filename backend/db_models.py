"""
SQLAlchemy ORM models for the Loyalty Registry service.

Tables:
    token_events      — append-only audit log of registry/ledger events
    auth_challenges   — wallet login nonces for signature verification
"""
from datetime import datetime

from sqlalchemy import (
    Column, Integer, BigInteger, String, DateTime, Text, UniqueConstraint, Index,
)

from database import Base


class AuditEvent(Base):
    """One row per emitted event, in emission order."""
    __tablename__ = "token_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(40), nullable=False, index=True)  # "Minted" | "Burned" | ...
    token_id = Column(BigInteger, nullable=True, index=True)  # null for Locked/Unlocked etc.
    actor = Column(String(58), nullable=True, index=True)
    counterparty = Column(String(58), nullable=True)
    payload = Column(Text, nullable=False, default="{}")  # JSON of event.to_dict()
    emitted_at = Column(DateTime, nullable=False)  # event timestamp (UTC)
    recorded_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        # For per-token history ordered by emission
        Index("ix_token_events_token_id_id", "token_id", "id"),
    )


class AuthChallenge(Base):
    """
    Short-lived nonce used for wallet signature-based authentication.

    Flow:
      1) Client requests challenge for a wallet.
      2) Client signs nonce bytes with the wallet.
      3) Backend verifies signature and issues JWT access token.
    """

    __tablename__ = "auth_challenges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wallet_address = Column(String(58), nullable=False, index=True)
    nonce = Column(String(128), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("wallet_address", "nonce", name="uq_auth_challenge_wallet_nonce"),
    )
