"""
Core types and pure functions for the Amplify token ledger.

This module provides the foundational pieces the ledger is built from:
1. Constants: token metadata, supply, and the null account
2. Protocols: TokenView for read-only ledger access
3. Exceptions: LedgerError and the domain-specific error types
4. Validation: amount and account checks applied to every call
5. Guard rules: pure precondition functions shared by the ledger operations
6. Helpers: conversion from whole tokens to base units

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, List, Tuple, Union, Protocol, runtime_checkable


# ============================================================================
# CONSTANTS
# ============================================================================

TOKEN_NAME = "Amplify"
TOKEN_SYMBOL = "AMPX"
DECIMALS = 18

# Sentinel account: source of the creation event and destination of burns.
NULL_ACCOUNT = "0x0000000000000000000000000000000000000000"

# Amounts are unsigned 256-bit integers.
UINT256_MAX = 2 ** 256 - 1


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Account identity (address-equivalent).
Account = str

# Mapping from account to balance held, in base units.
BalanceMap = Dict[Account, int]

# Mapping from (owner, spender) to the amount spender may still move.
AllowanceMap = Dict[Tuple[Account, Account], int]

# Anything to_base_units() accepts as a whole-token amount.
TokenAmount = Union[int, str, Decimal]


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TokenView(Protocol):
    """
    Read-only interface to ledger state.

    Guard rules receive a TokenView so they can inspect balances and
    allowances without being able to change them. TokenLedger implements
    this protocol; tests may pass any object with the same accessors.
    """

    @property
    def administrator(self) -> Account:
        """Return the account allowed to run admin-only operations."""
        ...

    @property
    def transfer_restricted(self) -> bool:
        """Return True while only the administrator may transfer."""
        ...

    @property
    def total_supply(self) -> int:
        """Return the number of base units in circulation."""
        ...

    def balance_of(self, account: Account) -> int:
        """Return the balance of an account (0 if it never held tokens)."""
        ...

    def allowance(self, owner: Account, spender: Account) -> int:
        """Return how much spender may still move out of owner's balance."""
        ...


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class Unauthorized(LedgerError):
    """Raised when a non-administrator attempts an admin-only operation."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when an operation would take an account's balance below zero."""
    pass


class InsufficientAllowance(LedgerError):
    """Raised when a delegated transfer exceeds the spender's allowance."""
    pass


class TransferRestricted(LedgerError):
    """Raised when a non-administrator transfers while the restriction period is active."""
    pass


class UnsafeApprovalChange(LedgerError):
    """Raised when a non-zero allowance is overwritten with another non-zero value."""
    pass


class UnsupportedOperation(LedgerError):
    """Raised for calls that select no operation, or one the ledger does not expose."""
    pass


class SubscriberError(Exception):
    """
    Raised after delivery when one or more subscribers failed.

    Not a LedgerError: the operation that emitted the events was applied
    and every subscriber was still called with every event. The individual
    failures are kept in errors, in the order they occurred.
    """

    def __init__(self, errors: List[Exception]):
        self.errors = list(errors)
        details = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} subscriber call(s) failed: {details}")


# ============================================================================
# VALIDATION
# ============================================================================

def validate_amount(value: int, label: str = "value") -> int:
    """
    Check that value is an unsigned 256-bit integer.

    Raises:
        ValueError: If value is not an int (bool excluded), is negative,
                    or does not fit in 256 bits.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{label} must be non-negative, got {value}")
    if value > UINT256_MAX:
        raise ValueError(f"{label} exceeds uint256 range")
    return value


def validate_account(account: Account, label: str = "account") -> Account:
    """
    Check that account is a usable identity.

    Raises:
        ValueError: If account is not a string or is blank.
    """
    if not isinstance(account, str):
        raise ValueError(f"{label} must be str, got {type(account).__name__}")
    if not account.strip():
        raise ValueError(f"{label} cannot be empty")
    return account


# ============================================================================
# GUARD RULES
# ============================================================================
#
# Each rule inspects a TokenView and raises the matching LedgerError when the
# precondition does not hold. Operations call them before any mutation, so a
# failing rule always leaves the ledger untouched.
#

def require_administrator(view: TokenView, caller: Account) -> None:
    """Only the administrator may pass."""
    if caller != view.administrator:
        raise Unauthorized(f"{caller} is not the administrator")


def restriction_rule(view: TokenView, caller: Account) -> None:
    """
    Gate for transfer and transfer_from.

    While the restriction period is active only the administrator may move
    funds. Once it has ended, every account may.

    Raises:
        TransferRestricted: If the period is active and caller is not the administrator.
    """
    if view.transfer_restricted and caller != view.administrator:
        raise TransferRestricted(
            f"transfers are restricted to {view.administrator} until the restriction ends"
        )


def require_balance(view: TokenView, account: Account, value: int) -> None:
    """Account must hold at least value."""
    balance = view.balance_of(account)
    if value > balance:
        raise InsufficientBalance(f"{account}: balance {balance} < {value}")


def require_allowance(view: TokenView, owner: Account, spender: Account, value: int) -> None:
    """Spender must be allowed to move at least value out of owner's balance."""
    allowed = view.allowance(owner, spender)
    if value > allowed:
        raise InsufficientAllowance(
            f"{spender} may move {allowed} from {owner}, requested {value}"
        )


def approval_race_rule(view: TokenView, owner: Account, spender: Account, value: int) -> None:
    """
    Refuse to replace a non-zero allowance with another non-zero value.

    A spender watching the pending approval could otherwise spend the old
    allowance and then the new one. Owners must set the allowance to zero
    first and approve the new amount in a second call.

    Raises:
        UnsafeApprovalChange: If both the current and the requested allowance are non-zero.
    """
    current = view.allowance(owner, spender)
    if value != 0 and current != 0:
        raise UnsafeApprovalChange(
            f"{owner} -> {spender}: allowance is {current}, reset it to 0 before approving {value}"
        )


# ============================================================================
# HELPERS
# ============================================================================

def to_base_units(amount: TokenAmount, decimals: int = DECIMALS) -> int:
    """
    Convert a whole-token amount into integer base units.

    The conversion is exact: strings go through Decimal, never float.

    Args:
        amount: Whole-token amount, e.g. 1200, "12e8" or Decimal("0.5").
        decimals: Decimal precision of the token (default: 18).

    Returns:
        amount * 10**decimals as an int.

    Raises:
        ValueError: If amount is not a number, is negative, or has more
                    fractional digits than the token's precision.

    Example:
        to_base_units("12e8") == 1_200_000_000 * 10**18
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, str, Decimal)):
        raise ValueError(f"amount must be int, str or Decimal, got {type(amount).__name__}")
    try:
        quantity = Decimal(amount)
    except InvalidOperation:
        raise ValueError(f"amount is not a number: {amount!r}") from None
    if not quantity.is_finite():
        raise ValueError(f"amount must be finite, got {amount!r}")
    if quantity < 0:
        raise ValueError(f"amount must be non-negative, got {amount!r}")

    # uint256 needs 78 digits; keep the scaling exact
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = quantity.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount!r} is finer than 10**-{decimals}")
    return validate_amount(int(scaled), "amount")


INITIAL_SUPPLY = to_base_units(1_200_000_000)
