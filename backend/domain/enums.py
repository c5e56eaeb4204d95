"""
Domain enums shared by the registry core, the audit log and the API.
"""

from enum import Enum


class GateState(str, Enum):
    """Effective transferability state derived from (transferable, locked)."""
    CLOSED_BY_POLICY = "CLOSED_BY_POLICY"
    CLOSED_BY_POLICY_AND_LOCK = "CLOSED_BY_POLICY_AND_LOCK"
    OPEN = "OPEN"
    CLOSED_BY_LOCK = "CLOSED_BY_LOCK"

    @classmethod
    def from_flags(cls, transferable: bool, locked: bool) -> "GateState":
        if transferable:
            return cls.CLOSED_BY_LOCK if locked else cls.OPEN
        return cls.CLOSED_BY_POLICY_AND_LOCK if locked else cls.CLOSED_BY_POLICY

    @property
    def permits_transfers(self) -> bool:
        return self is GateState.OPEN


class EventType(str, Enum):
    MINTED = "Minted"
    BURNED = "Burned"
    LOCKED = "Locked"
    UNLOCKED = "Unlocked"
    TRANSFER = "Transfer"
    APPROVAL = "Approval"
    APPROVAL_FOR_ALL = "ApprovalForAll"
    ADMINISTRATOR_TRANSFERRED = "AdministratorTransferred"
