"""
helpers.py - Shared accounts and state utilities for the test suites

Accounts mirror the roles of the crowdsale scenario: the owner who creates
the token, another holder, and a buyer/seller pair for delegated transfers.
"""

from typing import Any, Dict, Optional

from amplify import TokenLedger


OWNER = "0x00000000000000000000000000000000000000a1"
OTHER = "0x00000000000000000000000000000000000000b2"
BUYER = "0x00000000000000000000000000000000000000c3"
SELLER = "0x00000000000000000000000000000000000000d4"

ALL_ACCOUNTS = (OWNER, OTHER, BUYER, SELLER)


def snapshot(ledger: TokenLedger, accounts=ALL_ACCOUNTS) -> Dict[str, Any]:
    """Capture every observable piece of ledger state for the given accounts."""
    return {
        "balances": {a: ledger.balance_of(a) for a in accounts},
        "allowances": {
            (o, s): ledger.allowance(o, s)
            for o in accounts for s in accounts
        },
        "total_supply": ledger.total_supply,
        "transfer_restricted": ledger.transfer_restricted,
        "administrator": ledger.administrator,
        "events": ledger.events.all(),
    }


def sum_of_balances(ledger: TokenLedger) -> int:
    """Sum every non-zero balance in the ledger."""
    return sum(ledger.holders().values())


def verify_conservation(ledger: TokenLedger, expected_total: Optional[int] = None) -> bool:
    """
    Verify conservation for a ledger.

    Returns:
        True if balances add up to total supply (and to expected_total, if given)
    """
    result = ledger.verify_conservation()
    if not result["valid"]:
        return False
    if expected_total is not None:
        return result["total_supply"] == expected_total
    return True
