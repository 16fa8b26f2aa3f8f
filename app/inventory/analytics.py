"""
Read-side analytics: valuation stats, sales summaries, listings and search.

Nothing here mutates state. Classification always goes through
``app.inventory.classifier`` so every listing, count and alert agrees on what
"low-stock" or "dead-stock" means.
"""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from app.db.models import Product, utcnow
from app.inventory import classifier
from app.inventory.classifier import DEAD_STOCK_DAYS, StockCategory
from app.inventory.errors import ValidationError
from app.inventory.ledger import sales_in_window
from app.inventory.store import all_products, products_by_id

TOP_PRODUCTS_LIMIT = 5
DELETED_PRODUCT_NAME = "Deleted product"

SORT_KEYS = ("quantity-asc", "quantity-desc", "value-desc", "name", "newest")


@dataclass
class InventoryStats:
    total_products: int
    low_stock_count: int
    dead_stock_count: int
    out_of_stock_count: int
    total_value: float


@dataclass
class TopProduct:
    product_id: int
    name: str
    sku: str | None
    quantity: int = 0
    revenue: float = 0.0


@dataclass
class SalesSummary:
    total_sales: int
    total_revenue: float
    total_units: int
    average_order_value: float
    top_products: list[TopProduct] = field(default_factory=list)
    period: str = ""


@dataclass
class InventorySnapshot:
    total_products: int
    out_of_stock_count: int
    low_stock_count: int
    dead_stock_count: int
    total_value: float
    dead_stock_value: float


def total_value(products) -> float:
    return sum(p.quantity * p.price for p in products)


def get_stats(db: Session, now: datetime | None = None, dead_stock_days: int = DEAD_STOCK_DAYS) -> InventoryStats:
    now = now or utcnow()
    products = all_products(db)
    return InventoryStats(
        total_products=len(products),
        low_stock_count=sum(1 for p in products if classifier.is_low_stock(p)),
        dead_stock_count=sum(1 for p in products if classifier.is_dead_stock(p, now, dead_stock_days)),
        out_of_stock_count=sum(1 for p in products if classifier.is_out_of_stock(p)),
        total_value=total_value(products),
    )


def inventory_snapshot(products, now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS) -> InventorySnapshot:
    dead = [p for p in products if classifier.is_dead_stock(p, now, dead_stock_days)]
    return InventorySnapshot(
        total_products=len(products),
        out_of_stock_count=sum(1 for p in products if classifier.is_out_of_stock(p)),
        low_stock_count=sum(1 for p in products if classifier.is_low_stock(p)),
        dead_stock_count=len(dead),
        total_value=total_value(products),
        dead_stock_value=total_value(dead),
    )


def summarize_sales(sales, products: dict[int, Product], window_days: int) -> SalesSummary:
    """Aggregate window sales; ``products`` maps ids to live product rows."""
    total_sales = len(sales)
    total_revenue = sum(s.quantity * s.price for s in sales)
    total_units = sum(s.quantity for s in sales)

    per_product: dict[int, TopProduct] = {}
    for s in sales:
        entry = per_product.get(s.product_id)
        if entry is None:
            p = products.get(s.product_id)
            entry = per_product[s.product_id] = TopProduct(
                product_id=s.product_id,
                name=p.name if p else DELETED_PRODUCT_NAME,
                sku=p.sku if p else None,
            )
        entry.quantity += s.quantity
        entry.revenue += s.quantity * s.price

    # stable sort: equal revenue keeps first-seen order
    top = sorted(per_product.values(), key=lambda t: t.revenue, reverse=True)[:TOP_PRODUCTS_LIMIT]

    return SalesSummary(
        total_sales=total_sales,
        total_revenue=total_revenue,
        total_units=total_units,
        average_order_value=total_revenue / total_sales if total_sales else 0.0,
        top_products=top,
        period=f"Last {window_days} days",
    )


def sales_summary(db: Session, window_days: int = 30, now: datetime | None = None) -> SalesSummary:
    sales = sales_in_window(db, window_days, now or utcnow())
    products = products_by_id(db, (s.product_id for s in sales))
    return summarize_sales(sales, products, window_days)


# --- listing / search stages -------------------------------------------------

def filter_by_query(products, query: str | None):
    if not query:
        return list(products)
    needle = query.casefold()
    return [p for p in products if needle in p.name.casefold() or needle in p.sku.casefold()]


def filter_by_status(products, status, now: datetime, dead_stock_days: int = DEAD_STOCK_DAYS):
    if not status:
        return list(products)
    category = classifier.parse_category(status)
    return [p for p in products if classifier.matches(p, category, now, dead_stock_days)]


def sort_products(products, sort_by: str | None):
    products = list(products)
    if not sort_by:
        return products
    if sort_by == "quantity-asc":
        return sorted(products, key=lambda p: p.quantity)
    if sort_by == "quantity-desc":
        return sorted(products, key=lambda p: p.quantity, reverse=True)
    if sort_by == "value-desc":
        return sorted(products, key=lambda p: p.quantity * p.price, reverse=True)
    if sort_by == "name":
        return sorted(products, key=lambda p: p.name.casefold())
    if sort_by == "newest":
        return sorted(products, key=lambda p: (p.created_at, p.id), reverse=True)
    raise ValidationError(f"Unknown sort '{sort_by}'. Use one of: {', '.join(SORT_KEYS)}", field="sort")


def list_products(db: Session, sort: str | None = None) -> list[Product]:
    return sort_products(all_products(db), sort or "newest")


def search_products(
    db: Session,
    query: str | None = None,
    status: str | None = None,
    sort_by: str | None = None,
    now: datetime | None = None,
    dead_stock_days: int = DEAD_STOCK_DAYS,
) -> list[Product]:
    products = filter_by_query(all_products(db), query)
    products = filter_by_status(products, status, now or utcnow(), dead_stock_days)
    return sort_products(products, sort_by)


def _category_order(category: StockCategory):
    if category is StockCategory.DEAD_STOCK:
        # never-sold first, then longest idle
        return lambda p: (p.last_sold_at is not None, p.last_sold_at or datetime.min)
    if category is StockCategory.IN_STOCK:
        return lambda p: -p.quantity
    return lambda p: p.quantity


def list_by_category(db: Session, category, now: datetime | None = None, dead_stock_days: int = DEAD_STOCK_DAYS) -> list[Product]:
    category = classifier.parse_category(category) if isinstance(category, str) else category
    products = filter_by_status(all_products(db), category, now or utcnow(), dead_stock_days)
    return sorted(products, key=_category_order(category))