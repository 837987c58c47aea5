"""A single price level of an order book, kept in time priority."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator

from clobbered.order import Order, Side, saturating_sub
from clobbered.transaction import Fill, Log, Match


class Level:
    """Orders resting at one price on one side of the book.

    Orders are kept in arrival order. An order whose quantity drops to zero
    becomes a hole: it stays in storage but is skipped by every lookup and
    iteration until :meth:`make_compact` removes it.
    """

    def __init__(self, price: int, side: Side) -> None:
        self.price = price
        self.side = side
        self._orders: list[Order] = []

    def __repr__(self) -> str:
        return (
            f"Level(price={self.price!r}, side={self.side!r}, "
            f"orders={list(self.orders())!r})"
        )

    def has_volume(self) -> bool:
        """Whether any order at this level has quantity left."""
        return any(order.has_volume() for order in self._orders)

    def is_crossed_by_order(self, order: Order) -> bool:
        """Whether ``order``, from the opposite side, crosses this level.

        Stop orders are compared by their stop price. An ask level is crossed
        when its price is at or below the order's price, a bid level when its
        price is at or above it.
        """
        order_price = order.reference_price()
        if self.side is Side.ASK:
            return self.price <= order_price
        return self.price >= order_price

    def push(self, order: Order) -> None:
        """Append ``order`` to the back of the level."""
        if order.side is not self.side:
            raise ValueError(
                f"cannot push a {order.side.name} order onto a {self.side.name} level"
            )
        self._orders.append(order)

    def get(self, order_id: uuid.UUID) -> Order | None:
        """Return the live order with ``order_id``, or ``None``."""
        return next(
            (order for order in self.orders() if order.order_id == order_id), None
        )

    def cancel(self, order_id: uuid.UUID) -> None:
        """Remove all volume from the live order with ``order_id``, if any."""
        order = self.get(order_id)
        if order is not None:
            order.quantity = 0

    def match_order(
        self,
        taker: Order,
        log: Log,
        on_remove: Callable[[Order], None],
    ) -> None:
        """Trade ``taker`` against the resting orders in time priority.

        Every trade is logged as a :class:`Match` at this level's price. Makers
        that become filled are passed to ``on_remove`` and logged as a
        :class:`Fill`. All-or-none makers larger than the taker are skipped.
        Matching stops as soon as the taker is filled.
        """
        for maker in self.orders():
            exchanged = 0
            if taker.quantity >= maker.quantity:
                exchanged = maker.quantity
                taker.quantity = saturating_sub(taker.quantity, exchanged)
                maker.quantity = 0
            elif not maker.needs_full_execution():
                exchanged = taker.quantity
                maker.quantity = saturating_sub(maker.quantity, exchanged)
                taker.quantity = 0

            if exchanged:
                log.push(
                    Match(
                        active_order_id=taker.order_id,
                        passive_order_id=maker.order_id,
                        price=self.price,
                        quantity=exchanged,
                    )
                )

            if maker.is_filled():
                on_remove(maker)
                log.push(
                    Fill(order_id=maker.order_id, side=maker.side, unfilled_quantity=0)
                )

            if taker.is_filled():
                break

    def orders(self) -> Iterator[Order]:
        """Iterate over the orders with volume, oldest first.

        The yielded orders may be modified; one whose quantity is set to zero
        is treated as removed from then on.
        """
        return (order for order in self._orders if order.has_volume())

    def drain_orders(self) -> Iterator[Order]:
        """Empty the level, returning the orders that still had volume."""
        drained, self._orders = self._orders, []
        return (order for order in drained if order.has_volume())

    def make_compact(self) -> None:
        """Drop the holes left by filled and cancelled orders from storage."""
        self._orders = [order for order in self._orders if order.has_volume()]