"""The matching engine that owns the order book."""

from __future__ import annotations

from clobbered.book import AddOrderError, Book
from clobbered.order import Order
from clobbered.transaction import Log


class ExecutionError(Exception):
    """Raised when the engine cannot execute an order."""

    def __init__(self, error: AddOrderError) -> None:
        super().__init__(str(error))
        self.error = error


class MatchEngine:
    """Executes incoming orders against a single order book."""

    def __init__(self) -> None:
        self._book = Book()

    def add_order(self, order: Order) -> Log:
        """Execute ``order`` and return the events it produced.

        Raises :class:`ExecutionError` if the book rejects the order.
        """
        log = Log()
        try:
            self._book.execute(order, log)
        except AddOrderError as error:
            raise ExecutionError(error) from error
        return log