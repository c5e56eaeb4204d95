"""
Registry Service — the process-wide LoyaltyRegistry behind the HTTP API.

The registry itself is synchronous and in-memory. This module:
    - builds it once from settings.administrator_wallet
    - serializes every mutating call behind a single asyncio.Lock
    - persists the events each call emitted to the audit log and commits

Events that could not be persisted (database failure after the registry
already changed) stay queued and are written with the next successful call.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from domain.errors import NotFoundError
from services import audit_service
from services.loyalty_registry import LoyaltyRegistry

logger = logging.getLogger(__name__)

_registry: Optional[LoyaltyRegistry] = None
_write_lock = asyncio.Lock()
_persisted_offset = 0


def get_registry() -> LoyaltyRegistry:
    """Return the registry, creating it on first use."""
    global _registry
    if _registry is None:
        if not settings.administrator_wallet:
            raise ValueError("ADMINISTRATOR_WALLET not set in .env")
        _registry = LoyaltyRegistry.create(settings.administrator_wallet)
    return _registry


def reset_registry(administrator: Optional[str] = None) -> LoyaltyRegistry:
    """Discard the current registry and build a fresh one (tests, demos)."""
    global _registry, _write_lock, _persisted_offset
    _registry = None
    _write_lock = asyncio.Lock()
    _persisted_offset = 0
    if administrator is not None:
        _registry = LoyaltyRegistry.create(administrator)
    return get_registry()


def pending_event_count() -> int:
    if _registry is None:
        return 0
    return len(_registry.event_log) - _persisted_offset


async def _persist_pending(db: AsyncSession) -> int:
    global _persisted_offset
    registry = get_registry()
    events = registry.event_log.since(_persisted_offset)
    try:
        await audit_service.record_events(db, events)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    _persisted_offset += len(events)
    # stored in token_events now; keep memory bounded
    registry.event_log.discard(len(events))
    return len(events)


async def flush_events(db: AsyncSession) -> int:
    """Persist any events not yet in the audit log. Returns how many were written."""
    async with _write_lock:
        return await _persist_pending(db)


async def _execute(db: AsyncSession, operation: Callable[[LoyaltyRegistry], Any]) -> Any:
    """
    Run one registry mutation, then record its events.

    Once the registry has changed the call succeeds: an audit write failure
    is logged and the events stay pending for the next call.
    """
    async with _write_lock:
        result = operation(get_registry())
        try:
            await _persist_pending(db)
        except SQLAlchemyError:
            logger.error(
                f"Audit write failed; {pending_event_count()} event(s) left pending",
                exc_info=True,
            )
        return result


# ── Mutations ───────────────────────────────────────────────────────

async def mint(db: AsyncSession, caller: str, recipient: str) -> int:
    return await _execute(db, lambda r: r.mint(caller, recipient))


async def burn(db: AsyncSession, caller: str, token_id: int) -> None:
    await _execute(db, lambda r: r.burn(caller, token_id))


async def transfer(db: AsyncSession, caller: str, sender: str, recipient: str, token_id: int) -> None:
    await _execute(db, lambda r: r.transfer(caller, sender, recipient, token_id))


async def approve(db: AsyncSession, caller: str, approved: Optional[str], token_id: int) -> None:
    await _execute(db, lambda r: r.ledger.approve(caller, approved, token_id))


async def set_approval_for_all(db: AsyncSession, caller: str, operator: str, approved: bool) -> None:
    await _execute(db, lambda r: r.ledger.set_approval_for_all(caller, operator, approved))


async def set_transferable(db: AsyncSession, caller: str, intent: bool) -> None:
    await _execute(db, lambda r: r.set_transferable(caller, intent))


async def lock(db: AsyncSession, caller: str) -> None:
    await _execute(db, lambda r: r.lock(caller))


async def unlock(db: AsyncSession, caller: str) -> None:
    await _execute(db, lambda r: r.unlock(caller))


async def transfer_administrator(db: AsyncSession, caller: str, new_administrator: str) -> None:
    await _execute(
        db, lambda r: r.access_control.transfer_administrator(caller, new_administrator)
    )


# ── Reads ───────────────────────────────────────────────────────────

def token_info(token_id: int) -> dict:
    """
    Current state of one identifier.

    Burnt identifiers (including the 0 sentinel) report burnt=True with no
    holder; identifiers never minted raise NotFoundError.
    """
    registry = get_registry()
    if registry.is_burnt(token_id):
        return {"tokenId": token_id, "burnt": True, "holder": None, "approved": None}
    if not registry.ledger.exists(token_id):
        raise NotFoundError("Token", token_id)
    return {
        "tokenId": token_id,
        "burnt": False,
        "holder": registry.ledger.owner_of(token_id),
        "approved": registry.ledger.get_approved(token_id),
    }


def get_status() -> dict:
    """Registry status for /admin/status and /health."""
    status = get_registry().to_dict()
    status["pendingEvents"] = pending_event_count()
    return status
