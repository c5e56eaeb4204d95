"""
Single-administrator access control.

One principal (a wallet address) holds administrative rights. Rights move
only through transfer_administrator(), which the current administrator calls.
"""
import logging
from typing import Optional

from domain.constants import is_null_address
from domain.errors import InvalidRecipientError, UnauthorizedError
from domain.events import AdministratorTransferredEvent, EventLog

logger = logging.getLogger(__name__)


class AccessControl:
    """Holds the administrator identity and enforces administrator-only calls."""

    def __init__(self, administrator: str, event_log: Optional[EventLog] = None):
        if is_null_address(administrator):
            raise InvalidRecipientError(administrator)
        self._administrator = administrator
        self._event_log = event_log if event_log is not None else EventLog()
        self._event_log.append(AdministratorTransferredEvent(previous=None, new=administrator))

    @property
    def administrator(self) -> str:
        return self._administrator

    def current_administrator(self) -> str:
        return self._administrator

    def is_administrator(self, caller: Optional[str]) -> bool:
        return caller is not None and caller == self._administrator

    def require_administrator(self, caller: Optional[str]) -> None:
        if not self.is_administrator(caller):
            logger.warning(f"Administrator check failed for caller={str(caller)[:8]}...")
            raise UnauthorizedError(
                "Administrator role required",
                details={"caller": caller},
            )

    def transfer_administrator(self, caller: str, new_administrator: str) -> AdministratorTransferredEvent:
        self.require_administrator(caller)
        if is_null_address(new_administrator):
            raise InvalidRecipientError(new_administrator)

        previous = self._administrator
        self._administrator = new_administrator
        logger.info(f"Administrator transferred: {previous[:8]}... -> {new_administrator[:8]}...")
        return self._event_log.append(
            AdministratorTransferredEvent(previous=previous, new=new_administrator)
        )
