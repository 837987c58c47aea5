"""Price levels of one side of the book, ordered from best to worst price."""

from __future__ import annotations

import uuid
from collections.abc import Iterator

from sortedcontainers import SortedDict

from clobbered.level import Level
from clobbered.order import MAX_PRICE, MIN_PRICE, Order, Side, saturating_sub


def crosses(side: Side, price: int, opposite: int) -> bool:
    """Whether ``price`` on ``side`` crosses ``opposite`` from the other side.

    An ask price crosses a bid price at or above it; a bid price crosses an
    ask price at or below it.
    """
    if side is Side.ASK:
        return price <= opposite
    return price >= opposite


def worst_possible(side: Side) -> int:
    """The worst price on ``side``: the maximum for asks, zero for bids."""
    return MAX_PRICE if side is Side.ASK else MIN_PRICE


def _take(still_needed: int, order: Order) -> int:
    """Reduce ``still_needed`` by what ``order`` can contribute."""
    if order.needs_full_execution():
        if still_needed >= order.quantity:
            return saturating_sub(still_needed, order.quantity)
        return still_needed
    return saturating_sub(still_needed, order.quantity)


class PriceLevels:
    """A map from price to :class:`Level` for one side of the book.

    Levels iterate from best to worst: ascending prices for asks, descending
    prices for bids.
    """

    def __init__(self, side: Side) -> None:
        self.side = side
        if side is Side.ASK:
            self._levels: SortedDict = SortedDict()
        else:
            self._levels = SortedDict(lambda price: -price)

    def __repr__(self) -> str:
        return f"PriceLevels(side={self.side!r}, prices={list(self._levels)!r})"

    def __len__(self) -> int:
        return len(self._levels)

    def best_price(self) -> int | None:
        """The best price of a level that has volume, or ``None``."""
        return next(
            (price for price, level in self._levels.items() if level.has_volume()),
            None,
        )

    def is_crossed_by(self, order: Order) -> bool:
        """Whether ``order`` from the opposite side crosses the first level.

        Stop orders are compared by their stop price. With no levels nothing
        is crossed.
        """
        if not self._levels:
            return False
        first_price, _ = self._levels.peekitem(0)
        return crosses(self.side, first_price, order.reference_price())

    def cancel_order(self, order_id: uuid.UUID, price: int) -> None:
        """Cancel the order with ``order_id`` at the level for ``price``.

        Raises :class:`KeyError` if there is no level at ``price``.
        """
        try:
            level = self._levels[price]
        except KeyError:
            raise KeyError(f"no level at price {price}") from None
        level.cancel(order_id)

    def insert_order(self, order: Order) -> None:
        """Append ``order`` to the level at its reference price.

        Market orders are never stored and raise :class:`ValueError`.
        """
        if order.is_market():
            raise ValueError("market orders cannot be stored in the book")
        price = order.reference_price()
        level = self._levels.get(price)
        if level is None:
            level = Level(price, self.side)
            self._levels[price] = level
        level.push(order)

    def get_order(self, order_id: uuid.UUID, price: int) -> Order | None:
        """The live order with ``order_id`` at ``price``, or ``None``."""
        level = self._levels.get(price)
        return None if level is None else level.get(order_id)

    def has_enough_volume(self, requested: int) -> bool:
        """Whether the levels hold enough volume to fill ``requested``.

        All-or-none and fill-or-kill orders only count when they fit whole
        into what is still needed.
        """
        still_needed = requested
        for _, level in self.levels():
            for order in level.orders():
                still_needed = _take(still_needed, order)
                if still_needed == 0:
                    return True
        return still_needed == 0

    def has_enough_volume_at_price_or_better(self, price: int, requested: int) -> bool:
        """Like :meth:`has_enough_volume`, but only walking levels until one
        whose price crosses ``price``."""
        still_needed = requested
        for level_price, level in self.levels():
            if crosses(self.side, level_price, price):
                break
            for order in level.orders():
                still_needed = _take(still_needed, order)
                if still_needed == 0:
                    return True
        return still_needed == 0

    def clean_levels_and_drop_empty(self) -> None:
        """Compact levels with volume and drop those without."""
        empty = []
        for price, level in self._levels.items():
            if level.has_volume():
                level.make_compact()
            else:
                empty.append(price)
        for price in empty:
            del self._levels[price]

    def levels(self) -> Iterator[tuple[int, Level]]:
        """Iterate over ``(price, level)`` pairs from best to worst."""
        return iter(self._levels.items())