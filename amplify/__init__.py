"""
amplify - Amplify (AMPX) Token Ledger

An in-memory fungible-token ledger with a restriction period, during which
only the administrator may transfer, and irreversible burns.

Usage:
    from amplify import TokenLedger, TransferEvent, to_base_units

    ledger = TokenLedger.create("owner")

    # Only the administrator can move tokens while restricted
    ledger.transfer("owner", "alice", to_base_units(1000))

    # Open transfers to everyone
    ledger.end_restriction("owner")

    # Delegated spend: reset to zero before changing a non-zero allowance
    ledger.approve("alice", "bob", to_base_units(250))
    ledger.transfer_from("bob", "alice", "carol", to_base_units(250))

    # Supply reduction
    ledger.burn("owner", 750)

    transfers = ledger.events.of_type(TransferEvent)
"""

# Core types
from .core import (
    TokenView,
    Account,
    BalanceMap,
    AllowanceMap,
    TokenAmount,
    # Exceptions
    LedgerError,
    Unauthorized,
    InsufficientBalance,
    InsufficientAllowance,
    TransferRestricted,
    UnsafeApprovalChange,
    UnsupportedOperation,
    SubscriberError,
    # Constants
    TOKEN_NAME,
    TOKEN_SYMBOL,
    DECIMALS,
    INITIAL_SUPPLY,
    NULL_ACCOUNT,
    UINT256_MAX,
    # Validation and guard rules
    validate_amount,
    validate_account,
    require_administrator,
    restriction_rule,
    require_balance,
    require_allowance,
    approval_race_rule,
    # Helpers
    to_base_units,
)

# Events
from .events import (
    Event,
    EventLog,
    TransferEvent,
    ApprovalEvent,
    BurnEvent,
    Subscriber,
)

# Ledger
from .ledger import TokenLedger

__all__ = [
    # Core
    'TokenView', 'Account', 'BalanceMap', 'AllowanceMap', 'TokenAmount',
    'LedgerError', 'Unauthorized', 'InsufficientBalance', 'InsufficientAllowance',
    'TransferRestricted', 'UnsafeApprovalChange', 'UnsupportedOperation', 'SubscriberError',
    'TOKEN_NAME', 'TOKEN_SYMBOL', 'DECIMALS', 'INITIAL_SUPPLY', 'NULL_ACCOUNT', 'UINT256_MAX',
    'validate_amount', 'validate_account',
    'require_administrator', 'restriction_rule', 'require_balance',
    'require_allowance', 'approval_race_rule',
    'to_base_units',
    # Events
    'Event', 'EventLog', 'TransferEvent', 'ApprovalEvent', 'BurnEvent', 'Subscriber',
    # Ledger
    'TokenLedger',
]
