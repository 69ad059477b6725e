"""
events.py - Event Records and the Append-Only Event Log

Every ledger operation reports what it did by appending immutable event
records to the ledger's EventLog. Operations never return events; observers
either query the log or subscribe to it.

Event kinds:
    TransferEvent(from_, to, value)     - tokens moved (also creation and burn)
    ApprovalEvent(owner, spender, value) - allowance set
    BurnEvent(burner, value)             - tokens destroyed
"""

from __future__ import annotations
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Tuple, Type, TypeVar, Union

from .core import Account, SubscriberError


@dataclass(frozen=True, slots=True)
class TransferEvent:
    """
    Tokens moved from one account to another.

    Creation is reported as a transfer from NULL_ACCOUNT, a burn as a
    transfer to NULL_ACCOUNT.
    """
    from_: Account
    to: Account
    value: int

    def __repr__(self) -> str:
        return f"Transfer({self.value}: {self.from_}→{self.to})"


@dataclass(frozen=True, slots=True)
class ApprovalEvent:
    """Owner set the amount spender may move on its behalf."""
    owner: Account
    spender: Account
    value: int

    def __repr__(self) -> str:
        return f"Approval({self.owner}→{self.spender}: {self.value})"


@dataclass(frozen=True, slots=True)
class BurnEvent:
    """Burner destroyed value tokens, reducing total supply."""
    burner: Account
    value: int

    def __repr__(self) -> str:
        return f"Burn({self.burner}: {self.value})"


Event = Union[TransferEvent, ApprovalEvent, BurnEvent]
EventT = TypeVar("EventT", TransferEvent, ApprovalEvent, BurnEvent)

# Observer called with each event after it has been appended.
Subscriber = Callable[[Event], None]


class EventLog:
    """
    Append-only, ordered record of emitted events.

    Records are never removed or rewritten. A batch appended with
    append_all() lands in the log as a unit, so observers never see half of
    an operation's events. Subscribers are notified separately via
    notify(), which the ledger calls after releasing its lock. Delivery
    follows log order even when a subscriber triggers further operations.

    Example:
        log = EventLog()
        log.subscribe(print)
        log.append_all([TransferEvent(NULL_ACCOUNT, "alice", 100)])
        log.notify(log.since(0))
        transfers = log.of_type(TransferEvent)
    """

    def __init__(self, events: Iterable[Event] = ()):
        self._events: List[Event] = list(events)
        self._subscribers: List[Subscriber] = []
        self._delivery = threading.local()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __getitem__(self, index: int) -> Event:
        return self._events[index]

    def append_all(self, events: Iterable[Event]) -> Tuple[Event, ...]:
        """
        Append a batch of events in order.

        Returns:
            The appended events, for passing to notify().
        """
        batch = tuple(events)
        self._events.extend(batch)
        return batch

    def notify(self, events: Iterable[Event]) -> None:
        """
        Deliver events to every subscriber, in emission order.

        A subscriber may call back into the ledger. Events emitted by such a
        nested call are queued behind the ones still being delivered, so
        subscribers see events in the order they were appended. Only the
        outermost notify() on a thread delivers.

        Every subscriber receives every event even if some of them raise.

        Raises:
            SubscriberError: After delivery, if any subscriber raised
        """
        pending = getattr(self._delivery, "pending", None)
        if pending is not None:
            pending.extend(events)
            return

        pending = self._delivery.pending = deque(events)
        errors: List[Exception] = []
        try:
            while pending:
                event = pending.popleft()
                for callback in list(self._subscribers):
                    try:
                        callback(event)
                    except Exception as e:
                        errors.append(e)
        finally:
            self._delivery.pending = None
        if errors:
            raise SubscriberError(errors) from errors[0]

    def all(self) -> Tuple[Event, ...]:
        """Return every event in emission order."""
        return tuple(self._events)

    def of_type(self, event_type: Type[EventT]) -> Tuple[EventT, ...]:
        """Return the events of one kind, in emission order."""
        return tuple(e for e in self._events if isinstance(e, event_type))

    def since(self, index: int) -> Tuple[Event, ...]:
        """
        Return the events appended at or after position index.

        Take len(log) before an operation and pass it here afterwards to
        inspect exactly what that operation emitted.
        """
        if index < 0:
            raise ValueError(f"index must be non-negative, got {index}")
        return tuple(self._events[index:])

    def subscribe(self, callback: Subscriber) -> None:
        """Register an observer for future events."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove an observer. Unknown callbacks are ignored."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def copy(self) -> EventLog:
        """Independent copy of the records, without subscribers."""
        return EventLog(self._events)
