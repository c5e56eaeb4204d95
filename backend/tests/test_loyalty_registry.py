"""
Unit tests for the LoyaltyRegistry state machine.

Tests: identifier allocation, mint/burn preconditions, burnt bookkeeping,
the two-flag transferability gate and the query surface.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from domain.constants import ZERO_ADDRESS
from domain.enums import EventType, GateState
from domain.errors import (
    AlreadyBurntError,
    ConflictError,
    InvalidRecipientError,
    NotFoundError,
    TransfersDisabledError,
    UnauthorizedError,
)
from domain.events import BurnedEvent, LockedEvent, MintedEvent, UnlockedEvent
from services.loyalty_registry import LoyaltyRegistry
from services.ownership_ledger import OwnershipLedger
from services.access_control import AccessControl
from conftest import ADMIN_WALLET, HOLDER_WALLET, OTHER_WALLET


class TestInitialState:

    @pytest.mark.unit
    def test_sentinel_is_burnt(self, registry):
        assert registry.is_burnt(0) is True

    @pytest.mark.unit
    def test_flags_default_false(self, registry):
        assert registry.is_transferable() is False
        assert registry.is_locked() is False
        assert registry.gate_state() is GateState.CLOSED_BY_POLICY

    @pytest.mark.unit
    def test_allocator_starts_at_one(self, registry):
        assert registry.next_id == 1

    @pytest.mark.unit
    def test_unseen_identifier_not_burnt(self, registry):
        assert registry.is_burnt(42) is False

    @pytest.mark.unit
    def test_gate_hook_installed_in_ledger(self, registry):
        assert registry.ledger.has_transfer_hook is True

    @pytest.mark.unit
    def test_ledger_accepts_only_one_hook(self):
        ledger = OwnershipLedger()
        LoyaltyRegistry(ledger, AccessControl(ADMIN_WALLET))
        with pytest.raises(ConflictError):
            LoyaltyRegistry(ledger, AccessControl(ADMIN_WALLET))


class TestMint:

    @pytest.mark.unit
    def test_first_mint_returns_one(self, registry):
        """Scenario A: first mint returns 1 and the token is live."""
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        assert token_id == 1
        assert registry.is_burnt(1) is False
        assert registry.ledger.owner_of(1) == HOLDER_WALLET

    @pytest.mark.unit
    def test_ids_strictly_increasing(self, registry):
        ids = [registry.mint(ADMIN_WALLET, HOLDER_WALLET) for _ in range(10)]
        assert ids == list(range(1, 11))
        assert 0 not in ids
        assert len(set(ids)) == len(ids)

    @pytest.mark.unit
    def test_ids_not_reused_after_burn(self, registry):
        first = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.burn(HOLDER_WALLET, first)
        second = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        assert second > first

    @pytest.mark.unit
    def test_mint_emits_minted_after_ledger_create(self, registry):
        offset = len(registry.event_log)
        registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        events = registry.event_log.since(offset)
        assert [e.event_type for e in events] == [EventType.TRANSFER, EventType.MINTED]
        minted = events[-1]
        assert isinstance(minted, MintedEvent)
        assert minted.recipient == HOLDER_WALLET
        assert minted.token_id == 1

    @pytest.mark.unit
    def test_non_admin_mint_unauthorized(self, registry):
        """Scenario E: allocator unchanged after a rejected mint."""
        registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        offset = len(registry.event_log)

        with pytest.raises(UnauthorizedError):
            registry.mint(HOLDER_WALLET, HOLDER_WALLET)

        assert registry.next_id == 2
        assert len(registry.event_log) == offset
        assert registry.mint(ADMIN_WALLET, OTHER_WALLET) == 2

    @pytest.mark.unit
    @pytest.mark.parametrize("recipient", ["", None, "   ", ZERO_ADDRESS])
    def test_null_recipient_rejected(self, registry, recipient):
        with pytest.raises(InvalidRecipientError):
            registry.mint(ADMIN_WALLET, recipient)
        assert registry.next_id == 1
        assert registry.ledger.exists(1) is False

    @pytest.mark.unit
    def test_unauthorized_checked_before_recipient(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.mint(OTHER_WALLET, ZERO_ADDRESS)

    @pytest.mark.unit
    def test_mint_to_administrator_allowed(self, registry):
        token_id = registry.mint(ADMIN_WALLET, ADMIN_WALLET)
        assert registry.ledger.owner_of(token_id) == ADMIN_WALLET


class TestBurn:

    @pytest.mark.unit
    def test_holder_burns(self, registry):
        """Scenario B: burn marks burnt; second burn fails AlreadyBurnt."""
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.burn(HOLDER_WALLET, token_id)

        assert registry.is_burnt(token_id) is True
        assert registry.ledger.exists(token_id) is False

        with pytest.raises(AlreadyBurntError):
            registry.burn(HOLDER_WALLET, token_id)

    @pytest.mark.unit
    def test_burn_emits_burned_with_caller(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        offset = len(registry.event_log)
        registry.burn(HOLDER_WALLET, token_id)

        events = registry.event_log.since(offset)
        assert [e.event_type for e in events] == [EventType.TRANSFER, EventType.BURNED]
        burned = events[-1]
        assert isinstance(burned, BurnedEvent)
        assert burned.caller == HOLDER_WALLET
        assert burned.token_id == token_id

    @pytest.mark.unit
    def test_never_minted_not_found(self, registry):
        with pytest.raises(NotFoundError):
            registry.burn(HOLDER_WALLET, 7)
        assert registry.is_burnt(7) is False

    @pytest.mark.unit
    def test_sentinel_burn_already_burnt(self, registry):
        with pytest.raises(AlreadyBurntError):
            registry.burn(ADMIN_WALLET, 0)

    @pytest.mark.unit
    def test_stranger_unauthorized(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        with pytest.raises(UnauthorizedError):
            registry.burn(OTHER_WALLET, token_id)
        assert registry.is_burnt(token_id) is False
        assert registry.ledger.owner_of(token_id) == HOLDER_WALLET

    @pytest.mark.unit
    def test_administrator_has_no_override(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        with pytest.raises(UnauthorizedError):
            registry.burn(ADMIN_WALLET, token_id)

    @pytest.mark.unit
    def test_administrator_burns_when_approved(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.ledger.approve(HOLDER_WALLET, ADMIN_WALLET, token_id)
        registry.burn(ADMIN_WALLET, token_id)
        assert registry.is_burnt(token_id) is True

    @pytest.mark.unit
    def test_operator_can_burn(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.ledger.set_approval_for_all(HOLDER_WALLET, OTHER_WALLET, True)
        registry.burn(OTHER_WALLET, token_id)
        assert registry.is_burnt(token_id) is True

    @pytest.mark.unit
    def test_burn_ignores_gate(self, registry):
        """Destruction is not a transfer; the gate never runs for it."""
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.lock(ADMIN_WALLET)
        registry.burn(HOLDER_WALLET, token_id)
        assert registry.is_burnt(token_id) is True

    @pytest.mark.unit
    def test_burnt_token_reports_already_burnt_to_anyone(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.burn(HOLDER_WALLET, token_id)
        with pytest.raises(AlreadyBurntError):
            registry.burn(OTHER_WALLET, token_id)

    @pytest.mark.unit
    def test_failed_burn_leaves_no_events(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        offset = len(registry.event_log)
        with pytest.raises(UnauthorizedError):
            registry.burn(OTHER_WALLET, token_id)
        assert len(registry.event_log) == offset


class TestTransferabilityGate:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "transferable, locked, expected",
        [
            (False, False, GateState.CLOSED_BY_POLICY),
            (False, True, GateState.CLOSED_BY_POLICY_AND_LOCK),
            (True, False, GateState.OPEN),
            (True, True, GateState.CLOSED_BY_LOCK),
        ],
    )
    def test_transfer_permitted_only_when_open(self, registry, transferable, locked, expected):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.set_transferable(ADMIN_WALLET, transferable)
        if locked:
            registry.lock(ADMIN_WALLET)

        assert registry.gate_state() is expected
        assert registry.transfers_permitted() == (registry.is_transferable() and not registry.is_locked())

        if expected is GateState.OPEN:
            registry.transfer(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)
            assert registry.ledger.owner_of(token_id) == OTHER_WALLET
        else:
            with pytest.raises(TransfersDisabledError) as exc_info:
                registry.transfer(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)
            assert exc_info.value.gate_state == expected.value
            assert registry.ledger.owner_of(token_id) == HOLDER_WALLET

    @pytest.mark.unit
    def test_scenario_c_lock_blocks_transfer(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.set_transferable(ADMIN_WALLET, True)
        registry.lock(ADMIN_WALLET)
        with pytest.raises(TransfersDisabledError):
            registry.transfer(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)

    @pytest.mark.unit
    def test_scenario_d_idempotent_unlock_then_transfer(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.set_transferable(ADMIN_WALLET, True)
        registry.unlock(ADMIN_WALLET)
        registry.transfer(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)
        assert registry.ledger.owner_of(token_id) == OTHER_WALLET

    @pytest.mark.unit
    @pytest.mark.parametrize("intent", [True, False])
    def test_lock_unlock_round_trip(self, registry, intent):
        registry.set_transferable(ADMIN_WALLET, intent)
        before = registry.gate_state()
        registry.lock(ADMIN_WALLET)
        registry.unlock(ADMIN_WALLET)
        assert registry.gate_state() is before

    @pytest.mark.unit
    def test_lock_is_idempotent(self, registry):
        registry.lock(ADMIN_WALLET)
        registry.lock(ADMIN_WALLET)
        assert registry.is_locked() is True
        registry.unlock(ADMIN_WALLET)
        assert registry.is_locked() is False

    @pytest.mark.unit
    def test_lock_and_unlock_emit_events(self, registry):
        offset = len(registry.event_log)
        registry.lock(ADMIN_WALLET)
        registry.unlock(ADMIN_WALLET)
        events = registry.event_log.since(offset)
        assert isinstance(events[0], LockedEvent)
        assert isinstance(events[1], UnlockedEvent)

    @pytest.mark.unit
    def test_set_transferable_emits_nothing(self, registry):
        offset = len(registry.event_log)
        registry.set_transferable(ADMIN_WALLET, True)
        assert len(registry.event_log) == offset
        assert registry.is_transferable() is True

    @pytest.mark.unit
    def test_is_transferable_ignores_lock(self, registry):
        registry.set_transferable(ADMIN_WALLET, True)
        registry.lock(ADMIN_WALLET)
        assert registry.is_transferable() is True
        assert registry.transfers_permitted() is False

    @pytest.mark.unit
    @pytest.mark.parametrize("operation", ["lock", "unlock"])
    def test_flag_changes_require_administrator(self, registry, operation):
        with pytest.raises(UnauthorizedError):
            getattr(registry, operation)(HOLDER_WALLET)
        assert registry.is_locked() is False

    @pytest.mark.unit
    def test_set_transferable_requires_administrator(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.set_transferable(HOLDER_WALLET, True)
        assert registry.is_transferable() is False

    @pytest.mark.unit
    def test_administrator_transfer_also_gated(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.ledger.set_approval_for_all(HOLDER_WALLET, ADMIN_WALLET, True)
        with pytest.raises(TransfersDisabledError):
            registry.transfer(ADMIN_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)

    @pytest.mark.unit
    def test_direct_ledger_transfer_cannot_bypass_gate(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        with pytest.raises(TransfersDisabledError):
            registry.ledger.transfer_from(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)

    @pytest.mark.unit
    def test_rejected_transfer_emits_nothing(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        offset = len(registry.event_log)
        with pytest.raises(TransfersDisabledError):
            registry.transfer(HOLDER_WALLET, HOLDER_WALLET, OTHER_WALLET, token_id)
        assert len(registry.event_log) == offset


class TestAdministratorHandover:

    @pytest.mark.unit
    def test_new_administrator_can_mint(self, registry):
        registry.access_control.transfer_administrator(ADMIN_WALLET, OTHER_WALLET)
        assert registry.administrator == OTHER_WALLET
        assert registry.mint(OTHER_WALLET, HOLDER_WALLET) == 1
        with pytest.raises(UnauthorizedError):
            registry.mint(ADMIN_WALLET, HOLDER_WALLET)


class TestStatus:

    @pytest.mark.unit
    def test_to_dict(self, registry):
        token_id = registry.mint(ADMIN_WALLET, HOLDER_WALLET)
        registry.burn(HOLDER_WALLET, token_id)
        registry.set_transferable(ADMIN_WALLET, True)

        status = registry.to_dict()
        assert status["administrator"] == ADMIN_WALLET
        assert status["nextId"] == 2
        assert status["gateState"] == "OPEN"
        assert status["burntCount"] == 1
        assert status["eventCount"] == len(registry.event_log)
