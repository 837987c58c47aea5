"""A price-time priority central limit order book and matching engine."""

__version__ = "0.1.0"
__all__ = ["book", "engine", "halfbook", "level", "order", "pricelevels", "transaction"]