"""A price-time priority order book."""

from __future__ import annotations

import dataclasses
import uuid
from typing import Optional, Tuple

from clobbered.halfbook import HalfBook
from clobbered.order import Order, OrderType, Side
from clobbered.pricelevels import crosses, worst_possible
from clobbered.transaction import Add, Cancel, Fill, Log

OrderMeta = Tuple[Side, OrderType, int]
"""Where an order is stored: its side, its type and the price of its level."""


class AddOrderError(Exception):
    """Raised when an order cannot be added to the book."""


class IdAlreadyExistsError(AddOrderError):
    """An order with the same identifier is already in the book."""

    def __init__(self, order: Order) -> None:
        super().__init__(f"an order with id {order.order_id} already exists")
        self.order = order


class Book:
    """A price-time order book with an ask and a bid half.

    Every order stored in either half is tracked by its identifier, together
    with the side, type and price that locate it.
    """

    def __init__(self) -> None:
        self.asks = HalfBook(Side.ASK)
        self.bids = HalfBook(Side.BID)
        self._meta: dict[uuid.UUID, OrderMeta] = {}

    def __repr__(self) -> str:
        return f"Book(asks={self.asks!r}, bids={self.bids!r})"

    def _half(self, side: Side) -> HalfBook:
        return self.asks if side is Side.ASK else self.bids

    def _remove(self, order: Order) -> None:
        self._meta.pop(order.order_id, None)

    def best_price(self, side: Side) -> Optional[int]:
        """The lowest ask or highest bid price with volume, or ``None``."""
        return self._half(side).best_price()

    def execute(self, order: Order, log: Log) -> None:
        """Match ``order`` against the book and store what is left of it.

        Post-only orders that would cross the market are rejected with a
        :class:`Fill` event. Market, immediate-or-cancel and fill-or-kill
        orders never rest on the book. The book then matches every crossing
        resting order and activates stop orders until nothing changes.
        The order object is modified and, if it rests, kept by the book.

        Raises :class:`IdAlreadyExistsError` if the identifier is known.
        """
        if self.contains(order.order_id):
            raise IdAlreadyExistsError(order)

        if order.is_post_only() and self.does_order_cross_market(order):
            log.push(
                Fill(
                    order_id=order.order_id,
                    side=order.side,
                    unfilled_quantity=order.quantity,
                )
            )
            return

        if not order.is_post_only() and order.is_executable():
            self._half(order.side.opposite()).perform_match(order, log, self._remove)

        if order.is_filled() or order.is_immediate():
            log.push(
                Fill(
                    order_id=order.order_id,
                    side=order.side,
                    unfilled_quantity=order.quantity,
                )
            )
        else:
            log.push(Add(dataclasses.replace(order)))
            self._add_order_unchecked(order)

        self._perform_full_match(log)

    def cancel(self, order_id: uuid.UUID, log: Log) -> bool:
        """Cancel the order with ``order_id``; return whether one was removed."""
        meta = self._meta.pop(order_id, None)
        if meta is None:
            return False
        side, order_type, price = meta
        self._half(side).cancel(order_id, order_type, price)
        log.push(Cancel(order_id=order_id))
        return True

    def contains(self, order_id: uuid.UUID) -> bool:
        """Whether the book knows the order with ``order_id``."""
        return order_id in self._meta

    def get_order(self, order_id: uuid.UUID) -> Optional[Order]:
        """The order with ``order_id`` if it is in the book."""
        meta = self._meta.get(order_id)
        if meta is None:
            return None
        side, order_type, price = meta
        return self._half(side).get(order_id, order_type, price)

    def get_order_meta(self, order_id: uuid.UUID) -> Optional[OrderMeta]:
        """The side, type and level price of the order with ``order_id``."""
        return self._meta.get(order_id)

    def does_order_cross_market(self, order: Order) -> bool:
        """Whether ``order`` crosses the best level of the opposite side."""
        return self._half(order.side.opposite()).is_crossed_by(order)

    def has_enough_volume_on_side(self, side: Side, requested: int) -> bool:
        """Whether ``side`` holds enough volume to fill ``requested``."""
        return self._half(side).has_enough_volume(requested)

    def has_enough_volume_on_side_at_price_or_better(
        self, side: Side, price: int, requested: int
    ) -> bool:
        """Whether ``side`` holds enough volume at ``price`` or better."""
        return self._half(side).has_enough_volume_at_price_or_better(price, requested)

    def _add_order_unchecked(self, order: Order) -> None:
        self._meta[order.order_id] = (
            order.side,
            order.order_type,
            order.reference_price(),
        )
        self._half(order.side).add_order(order)

    def _activate_stops(
        self,
        half: HalfBook,
        opposite: HalfBook,
        market_price: int,
        log: Log,
        report_remainder: bool,
    ) -> bool:
        activated = False
        for stop_price, stop_level in half.stop_orders.levels():
            if not crosses(half.side, stop_price, market_price):
                break
            for order in stop_level.drain_orders():
                activated = True
                opposite.perform_match(order, log, self._remove)
                if order.is_filled() or order.is_immediate():
                    del self._meta[order.order_id]
                    log.push(
                        Fill(
                            order_id=order.order_id,
                            side=order.side,
                            unfilled_quantity=order.quantity if report_remainder else 0,
                        )
                    )
                else:
                    log.push(Add(dataclasses.replace(order)))
                    self._meta[order.order_id] = (
                        order.side,
                        order.order_type,
                        order.price,
                    )
                    half.levels.insert_order(order)
        return activated

    def _activate_stop_orders(self, log: Log) -> None:
        market_ask = self.asks.best_price()
        if market_ask is None:
            market_ask = worst_possible(Side.ASK)
        market_bid = self.bids.best_price()
        if market_bid is None:
            market_bid = worst_possible(Side.BID)

        while True:
            bids_activated = self._activate_stops(
                self.bids, self.asks, market_ask, log, report_remainder=False
            )
            asks_activated = self._activate_stops(
                self.asks, self.bids, market_bid, log, report_remainder=True
            )
            if not (bids_activated or asks_activated):
                break

        self.asks.drop_empty_levels()
        self.bids.drop_empty_levels()
        self.asks.drop_empty_stop_order_levels()
        self.bids.drop_empty_stop_order_levels()

    def _match_resting(self, half: HalfBook, opposite: HalfBook, log: Log) -> bool:
        best_opposite = opposite.best_price()
        if best_opposite is None:
            return False
        happened = False
        for price, level in half.levels.levels():
            if not crosses(half.side, price, best_opposite):
                break
            before = len(log)
            for order in level.orders():
                opposite.perform_match(order, log, self._remove)
                if order.is_filled():
                    self._remove(order)
                    log.push(
                        Fill(order_id=order.order_id, side=order.side, unfilled_quantity=0)
                    )
            happened |= len(log) > before
        return happened

    def _perform_full_match(self, log: Log) -> None:
        while True:
            happened = self._match_resting(self.bids, self.asks, log)
            happened |= self._match_resting(self.asks, self.bids, log)
            before = len(log)
            self._activate_stop_orders(log)
            happened |= len(log) > before
            if not happened:
                break