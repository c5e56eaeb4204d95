"""
Events emitted by the loyalty registry and its collaborators.

Registry events:
    Minted(recipient, token_id)
    Burned(caller, token_id)
    Locked()
    Unlocked()

Collaborator events (ownership ledger / access control):
    Transfer(sender, recipient, token_id)
    Approval(owner, approved, token_id)
    ApprovalForAll(owner, operator, approved)
    AdministratorTransferred(previous, new)

Events are appended to a shared EventLog in the order the state changes
happen. The audit service persists them; tests read them back directly.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from domain.enums import EventType

logger = logging.getLogger(__name__)


class RegistryEvent:
    """Common accessors used when persisting any event to the audit log."""

    event_type: EventType

    @property
    def token_id(self) -> Optional[int]:
        return None

    @property
    def actor(self) -> Optional[str]:
        return None

    @property
    def counterparty(self) -> Optional[str]:
        return None

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data = {"event": self.event_type.value}
        data.update(self.payload())
        data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True)
class MintedEvent(RegistryEvent):
    recipient: str
    minted_id: int
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.MINTED

    @property
    def token_id(self) -> int:
        return self.minted_id

    @property
    def actor(self) -> str:
        return self.recipient

    def payload(self) -> Dict[str, Any]:
        return {"recipient": self.recipient, "tokenId": self.minted_id}


@dataclass(frozen=True)
class BurnedEvent(RegistryEvent):
    caller: str
    burnt_id: int
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.BURNED

    @property
    def token_id(self) -> int:
        return self.burnt_id

    @property
    def actor(self) -> str:
        return self.caller

    def payload(self) -> Dict[str, Any]:
        return {"caller": self.caller, "tokenId": self.burnt_id}


@dataclass(frozen=True)
class LockedEvent(RegistryEvent):
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.LOCKED


@dataclass(frozen=True)
class UnlockedEvent(RegistryEvent):
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.UNLOCKED


@dataclass(frozen=True)
class TransferEvent(RegistryEvent):
    """Ledger movement. sender is ZERO_ADDRESS on create, recipient on destroy."""
    sender: str
    recipient: str
    moved_id: int
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.TRANSFER

    @property
    def token_id(self) -> int:
        return self.moved_id

    @property
    def actor(self) -> str:
        return self.sender

    @property
    def counterparty(self) -> str:
        return self.recipient

    def payload(self) -> Dict[str, Any]:
        return {"from": self.sender, "to": self.recipient, "tokenId": self.moved_id}


@dataclass(frozen=True)
class ApprovalEvent(RegistryEvent):
    owner: str
    approved: str
    approved_id: int
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.APPROVAL

    @property
    def token_id(self) -> int:
        return self.approved_id

    @property
    def actor(self) -> str:
        return self.owner

    @property
    def counterparty(self) -> str:
        return self.approved

    def payload(self) -> Dict[str, Any]:
        return {"owner": self.owner, "approved": self.approved, "tokenId": self.approved_id}


@dataclass(frozen=True)
class ApprovalForAllEvent(RegistryEvent):
    owner: str
    operator: str
    approved: bool
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.APPROVAL_FOR_ALL

    @property
    def actor(self) -> str:
        return self.owner

    @property
    def counterparty(self) -> str:
        return self.operator

    def payload(self) -> Dict[str, Any]:
        return {"owner": self.owner, "operator": self.operator, "approved": self.approved}


@dataclass(frozen=True)
class AdministratorTransferredEvent(RegistryEvent):
    previous: Optional[str]
    new: str
    timestamp: float = field(default_factory=time.time)

    event_type = EventType.ADMINISTRATOR_TRANSFERRED

    @property
    def actor(self) -> Optional[str]:
        return self.previous

    @property
    def counterparty(self) -> str:
        return self.new

    def payload(self) -> Dict[str, Any]:
        return {"previousAdministrator": self.previous, "newAdministrator": self.new}


class EventLog:
    """
    Append-only, in-order event sink shared by the registry and its collaborators.

    Subscribers are called synchronously on every append. A subscriber that
    raises does not undo the append; the exception propagates to the caller.

    Offsets are absolute: len() counts every event ever appended, including
    those dropped with discard() once they are stored elsewhere.
    """

    def __init__(self):
        self._events: List[RegistryEvent] = []
        self._base = 0  # events discarded from the front
        self._subscribers: List[Callable[[RegistryEvent], None]] = []

    def append(self, event: RegistryEvent) -> RegistryEvent:
        self._events.append(event)
        logger.debug(f"Event #{len(self)}: {event.to_dict()}")
        for callback in self._subscribers:
            callback(event)
        return event

    def subscribe(self, callback: Callable[[RegistryEvent], None]) -> None:
        self._subscribers.append(callback)

    def since(self, offset: int) -> List[RegistryEvent]:
        """Events appended after the first `offset` events."""
        if offset < self._base:
            raise ValueError(f"events before offset {self._base} were discarded")
        return list(self._events[offset - self._base:])

    def discard(self, count: int) -> None:
        """Drop the `count` oldest retained events."""
        count = min(count, len(self._events))
        del self._events[:count]
        self._base += count

    @property
    def base_offset(self) -> int:
        return self._base

    @property
    def events(self) -> List[RegistryEvent]:
        """Retained events only."""
        return list(self._events)

    def __len__(self) -> int:
        return self._base + len(self._events)
