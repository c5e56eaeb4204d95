"""
Ownership Ledger — in-process non-fungible ownership records.

Tracks which wallet holds which token identifier, per-token approvals and
holder-wide operators, and moves tokens between holders. It does not decide
whether a transfer is allowed by policy: every transfer_from() first calls
the installed pre-transfer hook, and the hook vetoes by raising.

create()/destroy() are not transfers and never invoke the hook.
"""
import logging
from typing import Callable, Dict, Optional, Set, Tuple

from domain.constants import ZERO_ADDRESS, is_null_address
from domain.errors import (
    ConflictError,
    InvalidRecipientError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from domain.events import ApprovalEvent, ApprovalForAllEvent, EventLog, TransferEvent

logger = logging.getLogger(__name__)

# hook(sender, recipient, token_id) -> None; raises to reject the transfer
TransferHook = Callable[[str, str, int], None]


class OwnershipLedger:
    def __init__(self, event_log: Optional[EventLog] = None):
        self._owners: Dict[int, str] = {}
        self._balances: Dict[str, int] = {}
        self._token_approvals: Dict[int, str] = {}
        self._operators: Set[Tuple[str, str]] = set()  # (holder, operator)
        self._transfer_hook: Optional[TransferHook] = None
        self._event_log = event_log if event_log is not None else EventLog()

    # ── Hook point ────────────────────────────────────────────────────

    def install_transfer_hook(self, hook: TransferHook) -> None:
        if self._transfer_hook is not None:
            raise ConflictError("A pre-transfer hook is already installed")
        self._transfer_hook = hook

    @property
    def has_transfer_hook(self) -> bool:
        return self._transfer_hook is not None

    # ── Views ─────────────────────────────────────────────────────────

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise NotFoundError("Token", token_id)
        return owner

    def balance_of(self, holder: str) -> int:
        if is_null_address(holder):
            raise InvalidRecipientError(holder)
        return self._balances.get(holder, 0)

    def get_approved(self, token_id: int) -> Optional[str]:
        self.owner_of(token_id)
        return self._token_approvals.get(token_id)

    def is_approved_for_all(self, holder: str, operator: str) -> bool:
        return (holder, operator) in self._operators

    def is_owner_or_approved(self, caller: Optional[str], token_id: int) -> bool:
        """Holder, the wallet approved for this token, or an operator of the holder."""
        owner = self.owner_of(token_id)
        if not caller:
            return False
        return (
            caller == owner
            or self._token_approvals.get(token_id) == caller
            or self.is_approved_for_all(owner, caller)
        )

    # ── Creation / destruction ────────────────────────────────────────

    def create(self, holder: str, token_id: int) -> TransferEvent:
        if is_null_address(holder):
            raise InvalidRecipientError(holder)
        if token_id in self._owners:
            raise ConflictError(f"Token {token_id} already exists")

        self._owners[token_id] = holder
        self._balances[holder] = self._balances.get(holder, 0) + 1
        return self._event_log.append(
            TransferEvent(sender=ZERO_ADDRESS, recipient=holder, moved_id=token_id)
        )

    def destroy(self, token_id: int) -> TransferEvent:
        owner = self.owner_of(token_id)

        self._token_approvals.pop(token_id, None)
        del self._owners[token_id]
        self._balances[owner] -= 1
        return self._event_log.append(
            TransferEvent(sender=owner, recipient=ZERO_ADDRESS, moved_id=token_id)
        )

    # ── Approvals ─────────────────────────────────────────────────────

    def approve(self, caller: str, approved: Optional[str], token_id: int) -> ApprovalEvent:
        """
        Approve one wallet to move/burn token_id. Pass None (or the zero
        address) to clear the approval.
        """
        owner = self.owner_of(token_id)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise UnauthorizedError(
                "Only the holder or an approved operator can approve",
                details={"token_id": token_id},
            )
        if approved == owner:
            raise ValidationError("cannot approve the current holder", field="approved")

        if is_null_address(approved):
            self._token_approvals.pop(token_id, None)
            approved = ZERO_ADDRESS
        else:
            self._token_approvals[token_id] = approved
        return self._event_log.append(
            ApprovalEvent(owner=owner, approved=approved, approved_id=token_id)
        )

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> ApprovalForAllEvent:
        if is_null_address(caller):
            raise UnauthorizedError("Caller identity required")
        if is_null_address(operator):
            raise InvalidRecipientError(operator)
        if operator == caller:
            raise ValidationError("cannot set yourself as operator", field="operator")

        if approved:
            self._operators.add((caller, operator))
        else:
            self._operators.discard((caller, operator))
        return self._event_log.append(
            ApprovalForAllEvent(owner=caller, operator=operator, approved=approved)
        )

    # ── Transfer ──────────────────────────────────────────────────────

    def transfer_from(self, caller: str, sender: str, recipient: str, token_id: int) -> TransferEvent:
        owner = self.owner_of(token_id)
        if owner != sender:
            raise ValidationError(
                f"token {token_id} is not held by {sender}", field="sender"
            )
        if not self.is_owner_or_approved(caller, token_id):
            raise UnauthorizedError(
                "Caller is neither holder nor approved",
                details={"token_id": token_id},
            )
        if is_null_address(recipient):
            raise InvalidRecipientError(recipient)

        if self._transfer_hook is not None:
            self._transfer_hook(sender, recipient, token_id)

        self._token_approvals.pop(token_id, None)
        self._owners[token_id] = recipient
        self._balances[sender] -= 1
        self._balances[recipient] = self._balances.get(recipient, 0) + 1
        logger.info(f"Transfer: token {token_id} {sender[:8]}... -> {recipient[:8]}...")
        return self._event_log.append(
            TransferEvent(sender=sender, recipient=recipient, moved_id=token_id)
        )
