"""
test_crowdsale_lifecycle.py - Functional tests for the full token lifecycle

Walks the token through the phases it is deployed for:
    1. Creation: the owner holds 1.2 billion AMPX
    2. Crowdsale: only the owner moves tokens, burns are allowed
    3. Crowdsale over: every holder transfers and delegates freely

Every phase checks balances, allowances and supply conservation together.
"""

import pytest

from amplify import (
    TokenLedger, TransferEvent, BurnEvent, ApprovalEvent,
    INITIAL_SUPPLY, NULL_ACCOUNT, to_base_units,
    InsufficientBalance, InsufficientAllowance, TransferRestricted,
    UnsafeApprovalChange, Unauthorized, UnsupportedOperation,
)
from tests.helpers import OWNER, OTHER, BUYER, SELLER, verify_conservation


def _crowdsale_ledger() -> TokenLedger:
    """Ledger after creation with half the supply moved to OTHER."""
    ledger = TokenLedger.create(OWNER, verbose=False)
    ledger.transfer(OWNER, OTHER, INITIAL_SUPPLY // 2)
    return ledger


class TestDeployedToken:

    def test_initial_state(self):
        ledger = TokenLedger.create(OWNER, verbose=False)
        assert ledger.name == "Amplify"
        assert ledger.symbol == "AMPX"
        assert ledger.decimals == 18
        assert ledger.total_supply == to_base_units("12e8")
        assert ledger.balance_of(OWNER) == to_base_units("12e8")

    def test_creation_event_is_first_transfer(self):
        ledger = TokenLedger.create(OWNER, verbose=False)
        first = ledger.events.of_type(TransferEvent)[0]
        assert first.from_ == NULL_ACCOUNT
        assert first.to == OWNER
        assert first.value == INITIAL_SUPPLY

    def test_rejects_bare_value(self):
        ledger = TokenLedger.create(OWNER, verbose=False)
        with pytest.raises(UnsupportedOperation):
            ledger.receive(OWNER, 1)


class TestCrowdsalePhase:

    def test_burn_over_balance_then_valid_burn(self):
        ledger = _crowdsale_ledger()
        owner_balance = ledger.balance_of(OWNER)

        with pytest.raises(InsufficientBalance):
            ledger.burn(OWNER, INITIAL_SUPPLY + 1)
        assert ledger.balance_of(OWNER) == owner_balance
        assert ledger.total_supply == INITIAL_SUPPLY

        start = len(ledger.events)
        ledger.burn(OWNER, 750)
        assert ledger.events.since(start) == (
            BurnEvent(OWNER, 750),
            TransferEvent(OWNER, NULL_ACCOUNT, 750),
        )
        assert ledger.balance_of(OWNER) == owner_balance - 750
        assert ledger.total_supply == INITIAL_SUPPLY - 750
        assert verify_conservation(ledger, INITIAL_SUPPLY - 750)

    def test_only_owner_transfers(self):
        ledger = _crowdsale_ledger()
        assert ledger.transfer_restricted is True

        with pytest.raises(Unauthorized):
            ledger.end_restriction(OTHER)
        assert ledger.transfer_restricted is True

        owner_before = ledger.balance_of(OWNER)
        other_before = ledger.balance_of(OTHER)
        ledger.transfer(OWNER, OTHER, 1337)
        assert ledger.balance_of(OWNER) == owner_before - 1337
        assert ledger.balance_of(OTHER) == other_before + 1337

        with pytest.raises(TransferRestricted):
            ledger.transfer(OTHER, OWNER, 13)

    def test_owner_spends_approved_funds(self):
        ledger = _crowdsale_ledger()
        other_before = ledger.balance_of(OTHER)

        ledger.approve(OTHER, OWNER, 10_000)
        ledger.transfer_from(OWNER, OTHER, SELLER, 10_000)
        assert ledger.balance_of(SELLER) == 10_000

        ledger.approve(OTHER, OWNER, 10_000)
        ledger.transfer_from(OWNER, OTHER, SELLER, 4_000)
        ledger.transfer_from(OWNER, OTHER, SELLER, 6_000)
        assert ledger.balance_of(SELLER) == 20_000
        assert ledger.balance_of(OTHER) == other_before - 20_000

        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from(OWNER, OTHER, SELLER, 20_000)

        ledger.approve(OTHER, OWNER, 10_000)
        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from(OWNER, OTHER, SELLER, 200_000)

        ledger.approve(OTHER, OWNER, 0)
        excessive = ledger.balance_of(OTHER) + 1
        ledger.approve(OTHER, OWNER, excessive)
        with pytest.raises(InsufficientBalance):
            ledger.transfer_from(OWNER, OTHER, SELLER, excessive)

    def test_non_owner_spender_restricted(self):
        ledger = _crowdsale_ledger()
        ledger.approve(OWNER, OTHER, 10)
        with pytest.raises(TransferRestricted):
            ledger.transfer_from(OTHER, OWNER, SELLER, 10)


class TestAfterCrowdsale:

    def _open_ledger(self) -> TokenLedger:
        ledger = _crowdsale_ledger()
        ledger.end_restriction(OWNER)
        return ledger

    def test_owner_ends_crowdsale(self):
        ledger = self._open_ledger()
        assert ledger.transfer_restricted is False

    def test_any_account_transfers(self):
        ledger = self._open_ledger()
        owner_before = ledger.balance_of(OWNER)
        other_before = ledger.balance_of(OTHER)

        ledger.transfer(OTHER, OWNER, 600)
        assert ledger.balance_of(OTHER) == other_before - 600
        assert ledger.balance_of(OWNER) == owner_before + 600

    def test_cannot_transfer_more_than_balance(self):
        ledger = self._open_ledger()
        ledger.transfer(OTHER, OWNER, ledger.balance_of(OTHER))
        with pytest.raises(InsufficientBalance):
            ledger.transfer(OTHER, OWNER, 1)

    def test_buyer_spends_owner_approval(self):
        ledger = self._open_ledger()
        owner_before = ledger.balance_of(OWNER)

        ledger.approve(OWNER, BUYER, 10_000)
        ledger.transfer_from(BUYER, OWNER, SELLER, 10_000)
        ledger.approve(OWNER, BUYER, 10_000)
        ledger.transfer_from(BUYER, OWNER, SELLER, 4_000)
        ledger.transfer_from(BUYER, OWNER, SELLER, 6_000)

        assert ledger.balance_of(SELLER) == 20_000
        assert ledger.balance_of(OWNER) == owner_before - 20_000

        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from(BUYER, OWNER, SELLER, 20_000)

    def test_balance_drops_below_approval(self):
        ledger = self._open_ledger()
        balance = ledger.balance_of(OWNER)
        ledger.approve(OWNER, BUYER, 0)
        ledger.approve(OWNER, BUYER, balance)

        ledger.transfer(OWNER, OTHER, balance // 2)
        with pytest.raises(InsufficientBalance):
            ledger.transfer_from(BUYER, OWNER, SELLER, balance)

    def test_second_non_zero_approve_rejected(self):
        ledger = self._open_ledger()
        ledger.approve(OWNER, BUYER, 0)
        ledger.approve(OWNER, BUYER, 10_000)
        assert ledger.allowance(OWNER, BUYER) == 10_000

        with pytest.raises(UnsafeApprovalChange):
            ledger.approve(OWNER, BUYER, 10_000)
        assert ledger.allowance(OWNER, BUYER) == 10_000


class TestEndToEnd:

    def test_full_lifecycle_conserves_supply(self):
        ledger = TokenLedger.create(OWNER, verbose=False)
        ledger.transfer(OWNER, OTHER, to_base_units(1_000))
        ledger.burn(OWNER, to_base_units(200_000_000))
        ledger.end_restriction(OWNER)
        ledger.approve(OTHER, BUYER, to_base_units(400))
        ledger.transfer_from(BUYER, OTHER, SELLER, to_base_units(250))
        ledger.burn(SELLER, to_base_units(50))
        ledger.transfer(SELLER, NULL_ACCOUNT, to_base_units(1))

        expected_supply = to_base_units(1_000_000_000) - to_base_units(50)
        assert ledger.total_supply == expected_supply
        assert verify_conservation(ledger, expected_supply)
        assert ledger.balance_of(SELLER) == to_base_units(199)
        assert ledger.balance_of(NULL_ACCOUNT) == to_base_units(1)
        assert ledger.allowance(OTHER, BUYER) == to_base_units(150)

        kinds = [type(e) for e in ledger.events]
        assert kinds == [
            TransferEvent,                 # creation
            TransferEvent,                 # owner -> other
            BurnEvent, TransferEvent,      # owner burn
            ApprovalEvent,                 # other -> buyer
            TransferEvent,                 # delegated
            BurnEvent, TransferEvent,      # seller burn
            TransferEvent,                 # stranded at null account
        ]
