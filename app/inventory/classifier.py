"""
Stock classification.

Pure predicates over a product and a reference time. The categories are not
mutually exclusive: low-stock measures depletion and dead-stock measures
velocity, so a product can be both.
"""

from datetime import datetime, timedelta
from enum import Enum

from app.inventory.errors import ValidationError

DEAD_STOCK_DAYS = 30


class StockCategory(str, Enum):
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"
    IN_STOCK = "in-stock"
    DEAD_STOCK = "dead-stock"


def is_out_of_stock(product) -> bool:
    return product.quantity == 0


def is_low_stock(product) -> bool:
    return 0 < product.quantity <= product.reorder_level


def is_in_stock(product) -> bool:
    return product.quantity > product.reorder_level


def dead_stock_cutoff(now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS) -> datetime:
    return now - timedelta(days=dead_stock_days)


def is_dead_stock(product, now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS) -> bool:
    # zero stock ties up no capital, however long it has gone unsold
    if product.quantity <= 0:
        return False
    if product.last_sold_at is None:
        return True
    return product.last_sold_at < dead_stock_cutoff(now, dead_stock_days)


def parse_category(category: str) -> StockCategory:
    try:
        return StockCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in StockCategory)
        raise ValidationError(f"Unknown stock category '{category}'. Use one of: {allowed}") from None


def matches(product, category, now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS) -> bool:
    category = parse_category(category) if isinstance(category, str) else category
    if category is StockCategory.OUT_OF_STOCK:
        return is_out_of_stock(product)
    if category is StockCategory.LOW_STOCK:
        return is_low_stock(product)
    if category is StockCategory.IN_STOCK:
        return is_in_stock(product)
    return is_dead_stock(product, now, dead_stock_days)


def categories(product, now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS) -> set[StockCategory]:
    return {c for c in StockCategory if matches(product, c, now, dead_stock_days)}
