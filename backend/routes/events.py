"""
Audit log endpoint.

    GET /events?eventType=Minted&tokenId=3&limit=50&offset=0
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, pagination_params
from domain.enums import EventType
from domain.responses import paginated_response
from services import audit_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    event_type: Optional[EventType] = Query(None, alias="eventType"),
    token_id: Optional[int] = Query(None, alias="tokenId", ge=0),
    page: Pagination = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
):
    """Persisted events in emission order, optionally filtered."""
    type_value = event_type.value if event_type else None

    rows = await audit_service.list_events(
        db,
        limit=page["limit"],
        offset=page["offset"],
        event_type=type_value,
        token_id=token_id,
    )
    total = await audit_service.count_events(db, event_type=type_value, token_id=token_id)

    return paginated_response(
        [audit_service.serialize_event(r) for r in rows],
        limit=page["limit"],
        offset=page["offset"],
        total=total,
    )
