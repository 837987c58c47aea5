import uuid

import pytest

from clobbered.halfbook import HalfBook
from clobbered.order import (
    MAX_PRICE,
    OrderType,
    Side,
    TimeInForce,
    build_order,
)
from clobbered.transaction import Activate, Fill, Log, Match


def make(side, price=5, quantity=10, **kwargs):
    return build_order(
        order_id=uuid.uuid4(), side=side, price=price, quantity=quantity, **kwargs
    )


def test_limit_order_sets_best_price_and_is_retrievable():
    half = HalfBook(Side.ASK)
    order = make(Side.ASK, price=5)
    half.add_order(order)
    assert half.best_price() == 5
    assert half.get(order.order_id, OrderType.LIMIT, 5) is order


def test_stop_order_does_not_affect_best_price():
    half = HalfBook(Side.BID)
    order = make(Side.BID, price=10, order_type=OrderType.STOP_LIMIT, stop_price=11)
    half.add_order(order)
    assert half.best_price() is None
    assert half.get(order.order_id, OrderType.STOP_LIMIT, 11) is order


def test_market_order_cannot_be_added():
    half = HalfBook(Side.ASK)
    with pytest.raises(ValueError):
        half.add_order(make(Side.ASK, order_type=OrderType.MARKET))


def test_order_from_other_side_cannot_be_added():
    half = HalfBook(Side.ASK)
    with pytest.raises(ValueError):
        half.add_order(make(Side.BID))


def test_cancel_removes_order():
    half = HalfBook(Side.ASK)
    order = make(Side.ASK, price=5)
    half.add_order(order)
    half.cancel(order.order_id, OrderType.LIMIT, 5)
    assert half.get(order.order_id, OrderType.LIMIT, 5) is None
    assert half.best_price() is None


def test_cancel_market_type_raises():
    half = HalfBook(Side.ASK)
    with pytest.raises(ValueError):
        half.cancel(uuid.uuid4(), OrderType.MARKET, 5)


def test_get_market_type_raises():
    half = HalfBook(Side.ASK)
    with pytest.raises(ValueError):
        half.get(uuid.uuid4(), OrderType.MARKET, 5)


def test_limit_bid_partially_fills_resting_ask():
    half = HalfBook(Side.ASK)
    ask = make(Side.ASK, price=5, quantity=10)
    half.add_order(ask)
    bid = make(Side.BID, price=5, quantity=4)
    log = Log()
    removed = []
    half.perform_match(bid, log, removed.append)
    assert list(log.matches()) == [
        Match(
            active_order_id=bid.order_id,
            passive_order_id=ask.order_id,
            price=5,
            quantity=4,
        )
    ]
    assert bid.is_filled()
    assert ask.quantity == 10 - 4
    assert removed == []


def test_non_crossing_bid_does_not_match():
    half = HalfBook(Side.ASK)
    half.add_order(make(Side.ASK, price=10))
    bid = make(Side.BID, price=5, quantity=4)
    log = Log()
    half.perform_match(bid, log, lambda order: None)
    assert len(log) == 0
    assert bid.quantity == 4


def test_filled_maker_is_removed_and_logged():
    half = HalfBook(Side.ASK)
    ask = make(Side.ASK, price=5, quantity=3)
    half.add_order(ask)
    bid = make(Side.BID, price=5, quantity=10)
    log = Log()
    removed = []
    half.perform_match(bid, log, removed.append)
    assert removed == [ask]
    assert list(log.fills()) == [
        Fill(order_id=ask.order_id, side=Side.ASK, unfilled_quantity=0)
    ]
    assert bid.quantity == 10 - 3
    half.drop_empty_levels()
    assert len(half.levels) == 0
    assert half.best_price() is None


def test_time_priority_within_level():
    half = HalfBook(Side.ASK)
    first = make(Side.ASK, price=5, quantity=5)
    second = make(Side.ASK, price=5, quantity=5)
    half.add_order(first)
    half.add_order(second)
    bid = make(Side.BID, price=5, quantity=5)
    half.perform_match(bid, Log(), lambda order: None)
    assert first.is_filled()
    assert second.quantity == 5


def test_market_bid_without_slippage_gets_worst_ask_price():
    half = HalfBook(Side.ASK)
    half.add_order(make(Side.ASK, price=5, quantity=10))
    bid = make(Side.BID, quantity=4, order_type=OrderType.MARKET)
    half.perform_match(bid, Log(), lambda order: None)
    assert bid.price == MAX_PRICE
    assert bid.is_filled()


def test_market_bid_with_slippage_is_priced_from_best_ask():
    half = HalfBook(Side.ASK)
    half.add_order(make(Side.ASK, price=5, quantity=10))
    bid = make(Side.BID, quantity=4, order_type=OrderType.MARKET, slippage=2)
    half.perform_match(bid, Log(), lambda order: None)
    assert bid.price == 7
    assert bid.is_filled()


def test_market_ask_with_slippage_on_empty_bids_uses_zero():
    half = HalfBook(Side.BID)
    ask = make(Side.ASK, quantity=4, order_type=OrderType.MARKET, slippage=2)
    log = Log()
    half.perform_match(ask, log, lambda order: None)
    assert ask.price == 0
    assert ask.quantity == 4
    assert len(log) == 0


def test_stop_order_is_activated_as_market():
    half = HalfBook(Side.ASK)
    half.add_order(make(Side.ASK, price=5, quantity=10))
    bid = make(Side.BID, quantity=4, order_type=OrderType.STOP, stop_price=5)
    log = Log()
    half.perform_match(bid, log, lambda order: None)
    assert bid.order_type is OrderType.MARKET
    activations = [event for event in log if isinstance(event, Activate)]
    assert len(activations) == 1
    assert activations[0].order.order_id == bid.order_id
    assert activations[0].order.order_type is OrderType.MARKET
    assert bid.is_filled()


def test_stop_limit_order_is_activated_as_limit():
    half = HalfBook(Side.ASK)
    bid = make(Side.BID, price=5, order_type=OrderType.STOP_LIMIT, stop_price=6)
    log = Log()
    half.perform_match(bid, log, lambda order: None)
    assert bid.order_type is OrderType.LIMIT
    assert bid.price == 5
    assert isinstance(next(iter(log)), Activate)


def test_fill_or_kill_without_enough_volume_does_not_match():
    half = HalfBook(Side.ASK)
    ask = make(Side.ASK, price=5, quantity=3)
    half.add_order(ask)
    bid = make(
        Side.BID, price=5, quantity=10, time_in_force=TimeInForce.FILL_OR_KILL
    )
    log = Log()
    half.perform_match(bid, log, lambda order: None)
    assert list(log.matches()) == []
    assert bid.quantity == 10
    assert ask.quantity == 3


def test_perform_match_rejects_same_side_order():
    half = HalfBook(Side.ASK)
    with pytest.raises(ValueError):
        half.perform_match(make(Side.ASK), Log(), lambda order: None)


@pytest.mark.parametrize(
    "bid_price, expected", [(10, True), (5, True), (4, False)]
)
def test_is_crossed_by(bid_price, expected):
    half = HalfBook(Side.ASK)
    half.add_order(make(Side.ASK, price=5))
    assert half.is_crossed_by(make(Side.BID, price=bid_price)) is expected


def test_empty_half_is_not_crossed():
    half = HalfBook(Side.BID)
    assert half.is_crossed_by(make(Side.ASK, price=1)) is False


def test_has_enough_volume():
    half = HalfBook(Side.BID)
    half.add_order(make(Side.BID, price=5, quantity=3))
    half.add_order(make(Side.BID, price=4, quantity=3))
    assert half.has_enough_volume(6)
    assert not half.has_enough_volume(7)


def test_drop_empty_stop_order_levels():
    half = HalfBook(Side.ASK)
    stop = make(Side.ASK, order_type=OrderType.STOP, stop_price=4)
    half.add_order(stop)
    half.cancel(stop.order_id, OrderType.STOP, 4)
    assert len(half.stop_orders) == 1
    half.drop_empty_stop_order_levels()
    assert len(half.stop_orders) == 0