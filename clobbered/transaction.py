"""Events produced while matching orders, and the log that collects them."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

from clobbered.order import Order, Side


@dataclass(frozen=True)
class Activate:
    """A stop order was activated."""

    order: Order


@dataclass(frozen=True)
class Add:
    """An order was added to the book."""

    order: Order


@dataclass(frozen=True)
class Cancel:
    """An order was cancelled."""

    order_id: uuid.UUID


@dataclass(frozen=True)
class Fill:
    """An order left the book, not necessarily fully filled.

    ``unfilled_quantity`` is what remained of the order when it left.
    """

    order_id: uuid.UUID
    side: Side
    unfilled_quantity: int


@dataclass(frozen=True)
class Match:
    """The active order traded with a passive order resting on the book."""

    active_order_id: uuid.UUID
    passive_order_id: uuid.UUID
    price: int
    quantity: int


Event = Union[Activate, Add, Cancel, Fill, Match]


@dataclass
class Log:
    """The sequence of events produced while executing an order."""

    events: list[Event] = field(default_factory=list)

    def push(self, event: Event) -> None:
        self.events.append(event)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def adds(self) -> Iterator[Add]:
        return (event for event in self.events if isinstance(event, Add))

    def cancels(self) -> Iterator[Cancel]:
        return (event for event in self.events if isinstance(event, Cancel))

    def fills(self) -> Iterator[Fill]:
        return (event for event in self.events if isinstance(event, Fill))

    def matches(self) -> Iterator[Match]:
        return (event for event in self.events if isinstance(event, Match))