"""
conftest.py - Shared pytest fixtures for token ledger tests

Provides common fixtures used across unit, functional and conformance tests:
- Fresh ledger with the full initial supply
- Small-supply ledger for readable arithmetic
- Ledger with the restriction period already ended
"""

import pytest

from amplify import TokenLedger

from tests.helpers import OWNER, OTHER


@pytest.fixture
def ledger():
    """Fresh ledger created by OWNER with the full initial supply."""
    return TokenLedger.create(OWNER, verbose=False)


@pytest.fixture
def small_ledger():
    """Ledger created by OWNER with 1,000,000 base units."""
    return TokenLedger.create(OWNER, initial_supply=1_000_000, verbose=False)


@pytest.fixture
def open_ledger(small_ledger):
    """Small ledger with OTHER holding 100,000 and the restriction period ended."""
    small_ledger.transfer(OWNER, OTHER, 100_000)
    small_ledger.end_restriction(OWNER)
    return small_ledger
