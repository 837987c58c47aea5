# clobbered

A price-time priority central limit order book with a small matching engine.

Orders are matched first by price and then by arrival time. The book supports:

- **Order types** (`OrderType`): `LIMIT`, `MARKET`, `STOP` and `STOP_LIMIT`.
- **Time in force** (`TimeInForce`): `GOOD_TILL_CANCELED`, `IMMEDIATE_OR_CANCEL`,
  `FILL_OR_KILL` and `ALL_OR_NONE`.
- **Post-only orders**: an order flagged `post_only` that would cross the market
  is rejected with a `Fill` event instead of being matched.
- **Slippage** on market orders: the execution price is bounded to the market
  price plus (bids) or minus (asks) the slippage. Without slippage a market
  order takes any price.

Stop and stop-limit orders wait in the book until the market reaches their stop
price. They are then turned into market or limit orders and executed; what is
left of a stop-limit order rests on the book.

Prices and quantities are non-negative integers; order identifiers are
`uuid.UUID` values.

## Installation

```
pip install clobbered
```

## Usage

```python
from uuid import uuid4

from clobbered.engine import MatchEngine
from clobbered.order import OrderType, Side, build_order

engine = MatchEngine()

ask = build_order(order_id=uuid4(), side=Side.ASK, quantity=9, price=5)
engine.add_order(ask)

bid = build_order(
    order_id=uuid4(),
    side=Side.BID,
    order_type=OrderType.MARKET,
    quantity=20,
    price=5,
)
log = engine.add_order(bid)

for match in log.matches():
    print(match.active_order_id, match.passive_order_id, match.price, match.quantity)

for fill in log.fills():
    print(fill.order_id, fill.side, fill.unfilled_quantity)
```

`build_order` raises `NoSideError`, `NoPriceError`, or, for stop orders
without a stop price, `NoStopPriceError`. All three derive from `OrderError`,
which is a `ValueError`.

Every call to `MatchEngine.add_order` returns a `Log` of the events it caused.
The events come from `clobbered.transaction`:

- `Activate`: a stop order was triggered.
- `Add`: an order rested on the book.
- `Match`: two orders traded at a price level.
- `Fill`: an order left the book, together with any quantity left unfilled.
- `Cancel`: an order was cancelled.

A `Log` can be iterated and measured with `len()`. Its `adds()`, `cancels()`,
`fills()` and `matches()` methods return iterators over the events of one kind.

Use `Book` directly to cancel orders, look them up, and check prices and
liquidity:

```python
from clobbered.book import Book
from clobbered.transaction import Log

book = Book()
log = Log()
order = build_order(order_id=uuid4(), side=Side.ASK, quantity=10, price=7)
book.execute(order, log)
book.best_price(Side.ASK)                  # 7
book.get_order_meta(order.order_id)        # (Side.ASK, OrderType.LIMIT, 7)
book.has_enough_volume_on_side(Side.ASK, 5)
book.cancel(order.order_id, log)           # True
```

`Book.execute` raises `IdAlreadyExistsError`, a subclass of `AddOrderError`,
if an order with the same identifier is already on the book.
`MatchEngine.add_order` reports the same case as `ExecutionError`, whose
`error` attribute holds the original exception.

The lower-level parts are importable too: `clobbered.level.Level` (the orders
at one price), `clobbered.pricelevels.PriceLevels` (the levels of one side,
best price first) and `clobbered.halfbook.HalfBook` (one side of the book with
its pending stop orders).

## What it does not do

- `MatchEngine` keeps a single order book; it has no notion of symbols or
  instruments.
- There is no command-line program, network interface or persistence: the
  book lives in memory for as long as the Python objects do.
- Orders cannot be modified in place, only cancelled and resubmitted.

## Tests

```
pip install clobbered[test]
pytest
```