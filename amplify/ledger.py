"""
ledger.py - Stateful Token Ledger

The TokenLedger class is the central state manager for the Amplify token.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements the TokenView protocol for read-only access by guard rules
    - Applies each operation atomically (all mutations and events, or none)
    - Maintains balances, allowances, total supply and the restriction flag
    - Records every effect in an append-only EventLog
    - Serializes concurrent callers behind a single lock
"""

from __future__ import annotations
import inspect
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

from .core import (
    # Types
    Account, AllowanceMap, BalanceMap,
    # Constants
    TOKEN_NAME, TOKEN_SYMBOL, DECIMALS, INITIAL_SUPPLY, NULL_ACCOUNT,
    # Exceptions
    LedgerError, SubscriberError, UnsupportedOperation,
    # Validation and guard rules
    validate_account, validate_amount,
    require_administrator, restriction_rule, require_balance,
    require_allowance, approval_race_rule,
)
from .events import (
    Event, EventLog, TransferEvent, ApprovalEvent, BurnEvent,
)


class TokenLedger:
    """
    Fungible-token ledger with a restriction period and burn support.

    The creator receives the whole initial supply and becomes the
    administrator. While the restriction period is active only the
    administrator can transfer; the administrator ends it once with
    end_restriction() and from then on every holder can transfer.

    Design Principles:
        - Caller is explicit: every mutating operation takes the acting
          account as its first argument. Authenticating it is the host's job.
        - Check, then mutate: guard rules run before any state changes, so a
          failed operation raises and leaves the ledger exactly as it was.
        - Always logs: every applied operation appends its events to
          self.events in the same critical section as its state change.

    Thread Safety:
        Mutating operations hold an internal lock. Subscribers are notified
        after the lock is released, in emission order. A failing subscriber
        does not undo the operation; see EventLog.notify().

    Example:
        ledger = TokenLedger.create("owner", verbose=False)
        ledger.transfer("owner", "alice", 1_000)
        ledger.end_restriction("owner")
        ledger.approve("alice", "bob", 400)
        ledger.transfer_from("bob", "alice", "carol", 400)
    """

    def __init__(
        self,
        creator: Account,
        initial_supply: int = INITIAL_SUPPLY,
        verbose: bool = True,
    ):
        """
        Create a ledger with the whole supply held by creator.

        Args:
            creator: Account that receives the supply and becomes administrator
            initial_supply: Supply in base units (default: 1.2 billion tokens)
            verbose: Print a line for every applied or rejected operation (default: True)

        Raises:
            ValueError: If creator is blank or initial_supply is not a uint256
        """
        validate_account(creator, "creator")
        validate_amount(initial_supply, "initial_supply")

        self.verbose = verbose
        self._administrator: Account = creator
        self._initial_supply: int = initial_supply
        self._total_supply: int = initial_supply
        self._transfer_restricted: bool = True
        self._balances: BalanceMap = {creator: initial_supply}
        self._allowances: AllowanceMap = {}
        self._events = EventLog()
        self._lock = threading.Lock()

        self._commit(
            [TransferEvent(NULL_ACCOUNT, creator, initial_supply)],
            f"CREATE {initial_supply} {TOKEN_SYMBOL} → {creator}",
        )

    @classmethod
    def create(
        cls,
        creator: Account,
        initial_supply: int = INITIAL_SUPPLY,
        verbose: bool = True,
    ) -> TokenLedger:
        """Construct a ledger; same as TokenLedger(creator, ...)."""
        return cls(creator, initial_supply=initial_supply, verbose=verbose)

    def __repr__(self) -> str:
        state = "restricted" if self._transfer_restricted else "open"
        return (
            f"TokenLedger({TOKEN_SYMBOL}, supply={self._total_supply}, "
            f"admin={self._administrator}, {state})"
        )

    # ========================================================================
    # METADATA
    # ========================================================================

    @property
    def name(self) -> str:
        return TOKEN_NAME

    @property
    def symbol(self) -> str:
        return TOKEN_SYMBOL

    @property
    def decimals(self) -> int:
        return DECIMALS

    @property
    def initial_supply(self) -> int:
        """Supply the ledger was created with, in base units."""
        return self._initial_supply

    # ========================================================================
    # TokenView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def administrator(self) -> Account:
        """Account that created the ledger. Never changes."""
        return self._administrator

    @property
    def transfer_restricted(self) -> bool:
        """True until the administrator calls end_restriction()."""
        return self._transfer_restricted

    @property
    def total_supply(self) -> int:
        """Base units in circulation. Only ever decreases, via burn()."""
        return self._total_supply

    def balance_of(self, account: Account) -> int:
        """
        Get the balance of an account.

        Returns:
            Balance in base units (0 for accounts that never held tokens)
        """
        return self._balances.get(account, 0)

    def allowance(self, owner: Account, spender: Account) -> int:
        """
        Get how much spender may still move out of owner's balance.

        Returns:
            Remaining allowance in base units (0 if never approved)
        """
        return self._allowances.get((owner, spender), 0)

    @property
    def events(self) -> EventLog:
        """Append-only log of every event the ledger has emitted."""
        return self._events

    # ========================================================================
    # INSPECTION
    # ========================================================================

    def holders(self) -> BalanceMap:
        """Return every account with a non-zero balance."""
        with self._lock:
            return {a: b for a, b in self._balances.items() if b > 0}

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify that balances add up to the total supply.

        Accounts are summed in sorted order so repeated checks accumulate
        identically.

        Returns:
            Dict with keys:
            - 'valid': bool - True if sum of balances equals total supply
            - 'total_supply': int - Recorded total supply
            - 'sum_of_balances': int - Sum over every account
            - 'discrepancy': int - sum_of_balances - total_supply

        Example:
            result = ledger.verify_conservation()
            assert result['valid'], f"Supply drifted by {result['discrepancy']}"
        """
        with self._lock:
            total = sum(self._balances[a] for a in sorted(self._balances))
            supply = self._total_supply
        return {
            'valid': total == supply,
            'total_supply': supply,
            'sum_of_balances': total,
            'discrepancy': total - supply,
        }

    def clone(self) -> TokenLedger:
        """
        Create an independent copy of this ledger.

        Balances, allowances, supply, the restriction flag and the event
        records are copied; subscribers are not. Changes to the clone never
        affect the original, and vice versa.
        """
        cloned = TokenLedger.__new__(TokenLedger)
        with self._lock:
            cloned.verbose = self.verbose
            cloned._administrator = self._administrator
            cloned._initial_supply = self._initial_supply
            cloned._total_supply = self._total_supply
            cloned._transfer_restricted = self._transfer_restricted
            cloned._balances = dict(self._balances)
            cloned._allowances = dict(self._allowances)
            cloned._events = self._events.copy()
        cloned._lock = threading.Lock()
        return cloned

    # ========================================================================
    # ADMINISTRATION (Mutating)
    # ========================================================================

    def end_restriction(self, caller: Account) -> None:
        """
        End the restriction period so every account may transfer.

        The flag only ever goes from restricted to open. Calling again once
        open is a harmless success.

        Raises:
            Unauthorized: If caller is not the administrator
        """
        validate_account(caller, "caller")
        with self._lock:
            with self._rejections("END_RESTRICTION"):
                require_administrator(self, caller)
            self._transfer_restricted = False
            self._commit([], f"END_RESTRICTION by {caller}")

    # ========================================================================
    # TRANSFERS (Mutating)
    # ========================================================================

    def transfer(self, caller: Account, to: Account, value: int) -> None:
        """
        Move value from caller's balance to to.

        Transferring to NULL_ACCOUNT is an ordinary transfer: the tokens stay
        counted in total supply. Use burn() to destroy tokens.

        Raises:
            InsufficientBalance: If caller holds less than value
            TransferRestricted: If the restriction period is active and
                                caller is not the administrator
        """
        validate_account(caller, "caller")
        validate_account(to, "to")
        validate_amount(value)
        with self._lock:
            with self._rejections("TRANSFER"):
                require_balance(self, caller, value)
                restriction_rule(self, caller)
            self._move(caller, to, value)
            batch = self._commit(
                [TransferEvent(caller, to, value)],
                f"TRANSFER {value}: {caller}→{to}",
            )
        self._notify(batch)

    def approve(self, caller: Account, spender: Account, value: int) -> None:
        """
        Set the amount spender may move out of caller's balance.

        A non-zero allowance can only be replaced after resetting it to zero:
        approve(s, 100); approve(s, 0); approve(s, 50). Approval is not
        subject to the restriction period.

        Raises:
            UnsafeApprovalChange: If both the current and new allowance are non-zero
        """
        validate_account(caller, "caller")
        validate_account(spender, "spender")
        validate_amount(value)
        with self._lock:
            with self._rejections("APPROVE"):
                approval_race_rule(self, caller, spender, value)
            self._allowances[(caller, spender)] = value
            batch = self._commit(
                [ApprovalEvent(caller, spender, value)],
                f"APPROVE {caller}→{spender}: {value}",
            )
        self._notify(batch)

    def transfer_from(self, caller: Account, from_: Account, to: Account, value: int) -> None:
        """
        Move value from from_'s balance to to, spending caller's allowance.

        Preconditions are checked in a fixed order, which decides the error
        reported when several fail:
        1. allowance(from_, caller) >= value
        2. balance_of(from_) >= value
        3. caller passes the restriction gate

        Raises:
            InsufficientAllowance: If caller's allowance is below value
            InsufficientBalance: If from_ holds less than value
            TransferRestricted: If the restriction period is active and
                                caller is not the administrator
        """
        validate_account(caller, "caller")
        validate_account(from_, "from_")
        validate_account(to, "to")
        validate_amount(value)
        with self._lock:
            with self._rejections("TRANSFER_FROM"):
                require_allowance(self, from_, caller, value)
                require_balance(self, from_, value)
                restriction_rule(self, caller)
            self._allowances[(from_, caller)] = self.allowance(from_, caller) - value
            self._move(from_, to, value)
            batch = self._commit(
                [TransferEvent(from_, to, value)],
                f"TRANSFER_FROM {value}: {from_}→{to} (spender {caller})",
            )
        self._notify(batch)

    def burn(self, caller: Account, value: int) -> None:
        """
        Destroy value tokens from caller's balance, reducing total supply.

        Burning is allowed during the restriction period. Emits BurnEvent
        followed by a TransferEvent to NULL_ACCOUNT.

        Raises:
            InsufficientBalance: If caller holds less than value
        """
        validate_account(caller, "caller")
        validate_amount(value)
        with self._lock:
            with self._rejections("BURN"):
                require_balance(self, caller, value)
            self._balances[caller] = self.balance_of(caller) - value
            self._total_supply -= value
            batch = self._commit(
                [BurnEvent(caller, value), TransferEvent(caller, NULL_ACCOUNT, value)],
                f"BURN {value}: {caller} (supply {self._total_supply})",
            )
        self._notify(batch)

    # ========================================================================
    # HOST DISPATCH
    # ========================================================================

    def receive(self, caller: Account, value: int) -> None:
        """
        Refuse a bare value transfer that selects no operation.

        Raises:
            UnsupportedOperation: Always
        """
        with self._rejections("RECEIVE"):
            raise UnsupportedOperation(
                f"ledger does not accept bare transfers ({value} from {caller})"
            )

    def invoke(self, caller: Account, operation: Optional[str], *args: Any) -> None:
        """
        Run a mutating operation selected by name.

        Lets a host layer route decoded requests without knowing the method
        signatures, e.g. invoke("alice", "transfer", "bob", 10).

        Args:
            caller: Authenticated account making the call
            operation: One of "transfer", "approve", "transfer_from", "burn",
                       "end_restriction"
            *args: Positional arguments after caller

        Raises:
            UnsupportedOperation: If operation is None, empty or unknown, or
                                  args do not fit the operation's signature
        """
        handler = self._operations().get(operation) if isinstance(operation, str) else None
        if handler is None:
            with self._rejections("INVOKE"):
                raise UnsupportedOperation(f"no operation named {operation!r}")
        try:
            inspect.signature(handler).bind(caller, *args)
        except TypeError as e:
            with self._rejections("INVOKE"):
                raise UnsupportedOperation(f"{operation}: {e}") from None
        handler(caller, *args)

    def _operations(self) -> Dict[str, Callable[..., None]]:
        return {
            "transfer": self.transfer,
            "approve": self.approve,
            "transfer_from": self.transfer_from,
            "burn": self.burn,
            "end_restriction": self.end_restriction,
        }

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @contextmanager
    def _rejections(self, operation: str) -> Iterator[None]:
        """
        Report a LedgerError raised inside the block, then let it propagate.

        Args:
            operation: Label for the verbose trail
        """
        try:
            yield
        except LedgerError as e:
            if self.verbose:
                print(f"✗ REJECTED {operation}: {type(e).__name__}: {e}")
            raise

    def _move(self, source: Account, dest: Account, value: int) -> None:
        """Debit source and credit dest. Source == dest nets to zero."""
        self._balances[source] = self.balance_of(source) - value
        self._balances[dest] = self.balance_of(dest) + value

    def _notify(self, batch: Tuple[Event, ...]) -> None:
        """Deliver a committed batch to subscribers. Caller must not hold the lock."""
        try:
            self._events.notify(batch)
        except SubscriberError as e:
            if self.verbose:
                print(f"⚠️  SUBSCRIBER FAILED (operation applied): {e}")
            raise

    def _commit(self, events: Iterable[Event], summary: str) -> Tuple[Event, ...]:
        """Append an operation's events and print its line. Caller holds the lock."""
        batch = self._events.append_all(events)
        if self.verbose:
            print(f"✓ {summary}")
        return batch
