"""Orders, their attributes and the price arithmetic used by the book."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass

MAX_PRICE = 2**128 - 1
"""The largest representable price; the worst possible ask price."""

MIN_PRICE = 0
"""The smallest representable price; the worst possible bid price."""

NIL_ID = uuid.UUID(int=0)
"""The identifier an order gets when none is provided."""


class OrderError(ValueError):
    """Raised when an order cannot be built from the given attributes."""


class NoPriceError(OrderError):
    """The order has no price."""

    def __init__(self) -> None:
        super().__init__("order has no price")


class NoSideError(OrderError):
    """The order has no side."""

    def __init__(self) -> None:
        super().__init__("order has no side")


class NoStopPriceError(OrderError):
    """A stop order has no stop price."""

    def __init__(self) -> None:
        super().__init__("stop order has no stop price")


class Side(enum.Enum):
    """The side of the book an order belongs to."""

    ASK = 0
    BID = 1

    def opposite(self) -> Side:
        """Return the other side."""
        return Side.BID if self is Side.ASK else Side.ASK

    def is_ask(self) -> bool:
        return self is Side.ASK

    def is_bid(self) -> bool:
        return self is Side.BID


class OrderType(enum.Enum):
    """How an order is executed.

    Market orders execute at the best available price, limit orders at their
    price or better. Stop orders become market orders once their stop price
    is reached; stop-limit orders become limit orders.
    """

    LIMIT = 0
    MARKET = 1
    STOP = 2
    STOP_LIMIT = 3

    def is_stop(self) -> bool:
        return self in (OrderType.STOP, OrderType.STOP_LIMIT)


class TimeInForce(enum.Enum):
    """How long an order stays live.

    Good-till-canceled orders stay until filled or cancelled. Immediate-or-cancel
    orders execute at once, cancelling any remainder. Fill-or-kill orders must
    execute at once and in full. All-or-none orders must execute in full but may
    wait on the book.
    """

    GOOD_TILL_CANCELED = 0
    IMMEDIATE_OR_CANCEL = 1
    FILL_OR_KILL = 2
    ALL_OR_NONE = 3


def plus_slippage(price: int, slippage: int) -> int:
    """Return ``price + slippage``, saturating at :data:`MAX_PRICE`."""
    return min(price + slippage, MAX_PRICE)


def minus_slippage(price: int, slippage: int) -> int:
    """Return ``price - slippage``, saturating at zero."""
    return max(price - slippage, MIN_PRICE)


def is_better_than_or_equal_to(price: int, other: int, side: Side) -> bool:
    """Return whether ``price`` is at least as good as ``other`` on ``side``.

    For asks lower prices are better, for bids higher ones.
    """
    if side is Side.ASK:
        return price <= other
    return price >= other


def saturating_sub(value: int, other: int) -> int:
    """Return ``value - other``, never going below zero."""
    return max(value - other, 0)


@dataclass
class Order:
    """An order.

    ``slippage`` only matters for market orders: it bounds how far from the
    market price the order may execute. ``None`` means unbounded.
    """

    order_id: uuid.UUID
    order_type: OrderType
    time_in_force: TimeInForce
    side: Side
    quantity: int
    price: int
    stop_price: int
    slippage: int | None = None
    post_only: bool = False

    def reference_price(self) -> int:
        """The stop price for stop orders, the price otherwise."""
        return self.stop_price if self.is_stop() else self.price

    def is_ask(self) -> bool:
        return self.side.is_ask()

    def is_bid(self) -> bool:
        return self.side.is_bid()

    def is_executable(self) -> bool:
        """Whether the order is a market or limit order."""
        return self.order_type in (OrderType.MARKET, OrderType.LIMIT)

    def is_fill_or_kill(self) -> bool:
        return self.time_in_force is TimeInForce.FILL_OR_KILL

    def is_filled(self) -> bool:
        """Whether no quantity is left."""
        return self.quantity == 0

    def is_immediate(self) -> bool:
        """Whether the order must execute at once (market, FOK or IOC)."""
        return self.order_type is OrderType.MARKET or self.time_in_force in (
            TimeInForce.FILL_OR_KILL,
            TimeInForce.IMMEDIATE_OR_CANCEL,
        )

    def is_market(self) -> bool:
        return self.order_type is OrderType.MARKET

    def is_post_only(self) -> bool:
        """Whether the order is flagged post-only and is not immediate."""
        return self.post_only and not self.is_market() and not self.is_immediate()

    def is_stop(self) -> bool:
        return self.order_type.is_stop()

    def has_slippage(self) -> bool:
        return self.slippage is not None

    def has_volume(self) -> bool:
        """Whether quantity is left; the inverse of :meth:`is_filled`."""
        return self.quantity != 0

    def needs_full_execution(self) -> bool:
        """Whether the order may only execute in full (FOK or AON)."""
        return self.time_in_force in (
            TimeInForce.FILL_OR_KILL,
            TimeInForce.ALL_OR_NONE,
        )


def build_order(
    *,
    order_id: uuid.UUID = NIL_ID,
    order_type: OrderType = OrderType.LIMIT,
    time_in_force: TimeInForce = TimeInForce.GOOD_TILL_CANCELED,
    side: Side | None = None,
    quantity: int = 0,
    price: int | None = None,
    stop_price: int | None = None,
    slippage: int | None = None,
    post_only: bool = False,
) -> Order:
    """Build an order, checking that the required attributes are present.

    Raises :class:`NoSideError`, :class:`NoPriceError` or
    :class:`NoStopPriceError` (for stop orders), in that order of checking.
    Non-stop orders without a stop price get a stop price of zero.
    """
    if side is None:
        raise NoSideError()
    if price is None:
        raise NoPriceError()
    if stop_price is None:
        if order_type.is_stop():
            raise NoStopPriceError()
        stop_price = MIN_PRICE
    return Order(
        order_id=order_id,
        order_type=order_type,
        time_in_force=time_in_force,
        side=side,
        quantity=quantity,
        price=price,
        stop_price=stop_price,
        slippage=slippage,
        post_only=post_only,
    )