"""One side of an order book: resting orders plus pending stop orders."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Callable

from clobbered.order import (
    Order,
    OrderType,
    Side,
    minus_slippage,
    plus_slippage,
)
from clobbered.pricelevels import PriceLevels, worst_possible
from clobbered.transaction import Activate, Log


class HalfBook:
    """The ask or bid half of an order book.

    Executable limit orders rest in :attr:`levels`, ordered best price
    first. Stop and stop-limit orders wait in :attr:`stop_orders`, ordered by
    the price at which they activate.
    """

    def __init__(self, side: Side) -> None:
        self.side = side
        self.levels = PriceLevels(side)
        self.stop_orders = PriceLevels(side)

    def __repr__(self) -> str:
        return (
            f"HalfBook(side={self.side!r}, levels={self.levels!r}, "
            f"stop_orders={self.stop_orders!r})"
        )

    def _levels_for(self, order_type: OrderType) -> PriceLevels:
        if order_type is OrderType.LIMIT:
            return self.levels
        if order_type.is_stop():
            return self.stop_orders
        raise ValueError("market orders cannot be stored in the book")

    def cancel(self, order_id: uuid.UUID, order_type: OrderType, price: int) -> None:
        """Cancel the order with ``order_id`` stored under ``order_type`` at ``price``.

        Raises :class:`ValueError` for market orders and :class:`KeyError`
        if there is no level at ``price``.
        """
        self._levels_for(order_type).cancel_order(order_id, price)

    def get(self, order_id: uuid.UUID, order_type: OrderType, price: int) -> Order | None:
        """The live order with ``order_id`` stored under ``order_type`` at ``price``.

        Raises :class:`ValueError` for market orders.
        """
        return self._levels_for(order_type).get_order(order_id, price)

    def drop_empty_levels(self) -> None:
        """Compact the executable levels and drop those without volume."""
        self.levels.clean_levels_and_drop_empty()

    def drop_empty_stop_order_levels(self) -> None:
        """Compact the stop-order levels and drop those without volume."""
        self.stop_orders.clean_levels_and_drop_empty()

    def perform_match(
        self,
        order: Order,
        log: Log,
        on_remove: Callable[[Order], None],
    ) -> None:
        """Execute ``order`` from the opposite side against this half.

        Stop orders are turned into market orders and stop-limit orders into
        limit orders, and an :class:`Activate` event is logged for them.
        Market orders get their price set from the market price, moved by
        their slippage, or to the worst possible price if they have none.
        Orders that need full execution are not matched unless enough volume
        is available. Levels left without volume stay until
        :meth:`drop_empty_levels` is called.
        """
        if order.side is self.side:
            raise ValueError(
                f"cannot match a {order.side.name} order against the "
                f"{self.side.name} side"
            )

        was_stop = order.is_stop()
        if order.order_type is OrderType.STOP:
            order.order_type = OrderType.MARKET
        elif order.order_type is OrderType.STOP_LIMIT:
            order.order_type = OrderType.LIMIT

        if order.is_market():
            if order.slippage is not None:
                market_price = self.best_price()
                if market_price is None:
                    market_price = worst_possible(self.side)
                if order.side is Side.ASK:
                    order.price = minus_slippage(market_price, order.slippage)
                else:
                    order.price = plus_slippage(market_price, order.slippage)
            else:
                order.price = worst_possible(self.side)

        if was_stop:
            log.push(Activate(dataclasses.replace(order)))

        if order.needs_full_execution() and not self.has_enough_volume_at_price_or_better(
            order.price, order.quantity
        ):
            return

        for _, level in self.levels.levels():
            if order.is_filled() or not level.is_crossed_by_order(order):
                break
            level.match_order(order, log, on_remove)

    def best_price(self) -> int | None:
        """The lowest ask or highest bid price with volume, or ``None``."""
        return self.levels.best_price()

    def is_crossed_by(self, order: Order) -> bool:
        """Whether ``order`` from the opposite side crosses this half."""
        return self.levels.is_crossed_by(order)

    def has_enough_volume(self, requested: int) -> bool:
        """Whether the resting orders can fill ``requested``."""
        return self.levels.has_enough_volume(requested)

    def has_enough_volume_at_price_or_better(self, price: int, requested: int) -> bool:
        """Whether the resting orders up to ``price`` can fill ``requested``."""
        return self.levels.has_enough_volume_at_price_or_better(price, requested)

    def add_order(self, order: Order) -> None:
        """Store ``order`` without matching it.

        Limit orders go to the executable levels, stop orders to the stop
        levels. Market orders and orders from the other side raise
        :class:`ValueError`.
        """
        if order.side is not self.side:
            raise ValueError(
                f"cannot add a {order.side.name} order to the {self.side.name} side"
            )
        self._levels_for(order.order_type).insert_order(order)