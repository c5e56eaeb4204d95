"""
Audit Service — persists registry events and serves them back.

Rows are only ever inserted, never updated or deleted. The caller owns the
transaction: record_events() adds rows to the session, the registry service
commits.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import AuditEvent
from domain.events import RegistryEvent

logger = logging.getLogger(__name__)


def _filtered(query, event_type: Optional[str], token_id: Optional[int]):
    if event_type:
        query = query.where(AuditEvent.event_type == event_type)
    if token_id is not None:
        query = query.where(AuditEvent.token_id == token_id)
    return query


async def record_events(db: AsyncSession, events: Iterable[RegistryEvent]) -> list:
    """
    Stage one AuditEvent row per event, preserving order.

    Returns:
        list[AuditEvent]: the staged rows (ids assigned after flush).
    """
    rows = []
    for event in events:
        row = AuditEvent(
            event_type=event.event_type.value,
            token_id=event.token_id,
            actor=event.actor,
            counterparty=event.counterparty,
            payload=json.dumps(event.to_dict(), sort_keys=True),
            emitted_at=datetime.fromtimestamp(event.timestamp, tz=timezone.utc).replace(tzinfo=None),
        )
        db.add(row)
        rows.append(row)

    if rows:
        await db.flush()
        logger.debug(f"Audit: staged {len(rows)} event(s)")
    return rows


async def list_events(
    db: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    event_type: Optional[str] = None,
    token_id: Optional[int] = None,
) -> List:
    """Audit rows in emission order."""
    query = _filtered(select(AuditEvent), event_type, token_id)
    query = query.order_by(AuditEvent.id.asc()).offset(offset).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def count_events(
    db: AsyncSession,
    event_type: Optional[str] = None,
    token_id: Optional[int] = None,
) -> int:
    query = _filtered(select(func.count(AuditEvent.id)), event_type, token_id)
    result = await db.execute(query)
    return result.scalar_one()


def serialize_event(row) -> dict:
    """Audit row -> API dict."""
    return {
        "sequence": row.id,
        "eventType": row.event_type,
        "tokenId": row.token_id,
        "actor": row.actor,
        "counterparty": row.counterparty,
        "payload": json.loads(row.payload or "{}"),
        "emittedAt": row.emitted_at.isoformat() if row.emitted_at else None,
    }
