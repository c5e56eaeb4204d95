"""
Administrator endpoints — transferability gate and administrator handover.

Endpoints:
    GET  /admin/status         — Registry flags, gate state, allocator
    PUT  /admin/transferable   — Set transferability intent
    POST /admin/lock           — Emergency lock (idempotent)
    POST /admin/unlock         — Lift the lock (idempotent)
    POST /admin/transfer       — Hand administrator rights to another wallet

The registry rejects non-administrator callers with 403; these routes only
authenticate and forward.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_valid_caller
from domain.responses import success_response
from models import AdministratorTransferRequest, RegistryStatusResponse, TransferableRequest
from services import registry_service
from utils.validators import validate_wallet_address

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


def _status_payload() -> dict:
    status = RegistryStatusResponse(**registry_service.get_status())
    return status.model_dump(by_alias=True)


@router.get("/status")
async def get_registry_status():
    """Public read: flags, effective gate state and allocator position."""
    return success_response(_status_payload())


@router.put("/transferable")
async def set_transferable(
    request: TransferableRequest,
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    await registry_service.set_transferable(db, caller, request.transferable)
    return success_response(_status_payload())


@router.post("/lock")
async def lock_transfers(
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    await registry_service.lock(db, caller)
    return success_response(_status_payload())


@router.post("/unlock")
async def unlock_transfers(
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    await registry_service.unlock(db, caller)
    return success_response(_status_payload())


@router.post("/transfer")
async def transfer_administrator(
    request: AdministratorTransferRequest,
    caller: str = Depends(require_valid_caller),
    db: AsyncSession = Depends(get_db),
):
    validate_wallet_address(request.new_administrator, field="newAdministrator")

    await registry_service.transfer_administrator(db, caller, request.new_administrator)
    logger.info(f"Administrator handover requested by {caller[:8]}...")
    return success_response(_status_payload())
