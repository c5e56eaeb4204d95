"""
Loyalty Registry — lifecycle of non-transferable loyalty tokens.

The registry owns:
    next_id        — identifier allocator, starts at 1 (0 is the burnt sentinel)
    burnt          — identifier -> bool, irreversible once True
    transferable   — administrator's intent that tokens may move
    locked         — emergency override that forbids every transfer

and delegates holdings to an OwnershipLedger and the administrator identity
to AccessControl. On construction it installs check_transfer() as the
ledger's pre-transfer hook, so no ledger transfer can bypass the gate.

Every mutating operation takes the caller explicitly and validates
everything before touching state: a rejected call leaves the registry
exactly as it was.
"""
import logging
from typing import Dict, Optional

from domain.constants import FIRST_TOKEN_ID, SENTINEL_TOKEN_ID, is_null_address
from domain.enums import GateState
from domain.errors import (
    AlreadyBurntError,
    InvalidRecipientError,
    NotFoundError,
    TransfersDisabledError,
    UnauthorizedError,
)
from domain.events import (
    BurnedEvent,
    EventLog,
    LockedEvent,
    MintedEvent,
    TransferEvent,
    UnlockedEvent,
)
from services.access_control import AccessControl
from services.ownership_ledger import OwnershipLedger

logger = logging.getLogger(__name__)


class LoyaltyRegistry:

    def __init__(
        self,
        ledger: OwnershipLedger,
        access_control: AccessControl,
        event_log: Optional[EventLog] = None,
    ):
        self._ledger = ledger
        self._access = access_control
        self._event_log = event_log if event_log is not None else EventLog()

        self._next_id = FIRST_TOKEN_ID
        self._burnt: Dict[int, bool] = {SENTINEL_TOKEN_ID: True}
        self._transferable = False
        self._locked = False

        ledger.install_transfer_hook(self.check_transfer)
        logger.info(
            f"Loyalty registry created, administrator={access_control.administrator[:8]}..."
        )

    @classmethod
    def create(cls, administrator: str) -> "LoyaltyRegistry":
        """Build a registry with fresh collaborators sharing one event log."""
        event_log = EventLog()
        return cls(
            ledger=OwnershipLedger(event_log),
            access_control=AccessControl(administrator, event_log),
            event_log=event_log,
        )

    # ── Collaborators ─────────────────────────────────────────────────

    @property
    def ledger(self) -> OwnershipLedger:
        return self._ledger

    @property
    def access_control(self) -> AccessControl:
        return self._access

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def administrator(self) -> str:
        return self._access.current_administrator()

    @property
    def next_id(self) -> int:
        return self._next_id

    # ── Mint ──────────────────────────────────────────────────────────

    def mint(self, caller: str, recipient: str) -> int:
        """
        Issue the next identifier to recipient. Administrator only.

        Returns the new identifier, strictly greater than any issued before.
        """
        self._access.require_administrator(caller)
        if is_null_address(recipient):
            raise InvalidRecipientError(recipient)

        token_id = self._next_id
        self._ledger.create(recipient, token_id)
        self._next_id = token_id + 1

        self._event_log.append(MintedEvent(recipient=recipient, minted_id=token_id))
        logger.info(f"Minted token {token_id} -> {recipient[:8]}...")
        return token_id

    # ── Burn ──────────────────────────────────────────────────────────

    def burn(self, caller: str, token_id: int) -> None:
        """
        Permanently retire token_id.

        Caller must be the holder, approved for the token, or an operator of
        the holder. The administrator gets no override.
        """
        if self.is_burnt(token_id):
            raise AlreadyBurntError(token_id)
        if not self._ledger.exists(token_id):
            raise NotFoundError("Token", token_id)
        if not self._ledger.is_owner_or_approved(caller, token_id):
            logger.warning(f"Burn of token {token_id} rejected for {str(caller)[:8]}...")
            raise UnauthorizedError(
                "Caller is neither holder nor approved for this token",
                details={"token_id": token_id},
            )

        self._ledger.destroy(token_id)
        self._burnt[token_id] = True

        self._event_log.append(BurnedEvent(caller=caller, burnt_id=token_id))
        logger.info(f"Burned token {token_id} by {caller[:8]}...")

    # ── Transferability gate ──────────────────────────────────────────

    def set_transferable(self, caller: str, intent: bool) -> None:
        self._access.require_administrator(caller)
        self._transferable = bool(intent)
        logger.info(f"Transferability intent set to {self._transferable} ({self.gate_state().value})")

    def lock(self, caller: str) -> None:
        self._access.require_administrator(caller)
        self._locked = True
        self._event_log.append(LockedEvent())
        logger.warning(f"Transfers LOCKED ({self.gate_state().value})")

    def unlock(self, caller: str) -> None:
        self._access.require_administrator(caller)
        self._locked = False
        self._event_log.append(UnlockedEvent())
        logger.info(f"Transfers unlocked ({self.gate_state().value})")

    def gate_state(self) -> GateState:
        return GateState.from_flags(self._transferable, self._locked)

    def transfers_permitted(self) -> bool:
        return self.gate_state().permits_transfers

    def check_transfer(self, sender: str, recipient: str, token_id: int) -> None:
        """Pre-transfer hook installed in the ownership ledger."""
        state = self.gate_state()
        if not state.permits_transfers:
            logger.warning(
                f"Transfer of token {token_id} blocked: {state.value} "
                f"({str(sender)[:8]}... -> {str(recipient)[:8]}...)"
            )
            raise TransfersDisabledError(state.value, details={"token_id": token_id})

    def transfer(self, caller: str, sender: str, recipient: str, token_id: int) -> TransferEvent:
        """Ask the ledger to move a token; the gate runs inside the ledger."""
        return self._ledger.transfer_from(caller, sender, recipient, token_id)

    # ── Queries ───────────────────────────────────────────────────────

    def is_burnt(self, token_id: int) -> bool:
        return self._burnt.get(token_id, False)

    def is_transferable(self) -> bool:
        """Administrator intent only; see transfers_permitted() for the lock."""
        return self._transferable

    def is_locked(self) -> bool:
        return self._locked

    def to_dict(self) -> dict:
        return {
            "administrator": self.administrator,
            "nextId": self._next_id,
            "transferable": self._transferable,
            "locked": self._locked,
            "gateState": self.gate_state().value,
            "burntCount": sum(1 for t, b in self._burnt.items() if b and t != SENTINEL_TOKEN_ID),
            "eventCount": len(self._event_log),
        }

    def __repr__(self) -> str:
        return f"<LoyaltyRegistry next_id={self._next_id} gate={self.gate_state().value}>"
