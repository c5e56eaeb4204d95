"""
Shared FastAPI dependencies.

Routers import the caller, the registry and pagination from here so the
wiring lives in one place.
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query

from middleware.auth import require_caller
from services import registry_service
from services.loyalty_registry import LoyaltyRegistry
from utils.validators import validate_wallet_address


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit, "offset": offset}


def get_registry() -> LoyaltyRegistry:
    return registry_service.get_registry()


async def require_valid_caller(caller: str = Depends(require_caller)) -> str:
    """Authenticated caller whose wallet is a well-formed address."""
    return validate_wallet_address(caller, field="caller")
