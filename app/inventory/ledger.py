"""Append-only sale ledger."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import Sale, utcnow
from app.inventory.errors import ValidationError
from app.inventory.store import products_by_id

MAX_HISTORY_LIMIT = 500


@dataclass
class SaleRecord:
    id: int
    product_id: int
    product_name: str | None
    product_sku: str | None
    quantity: int
    price: float
    total: float
    sale_date: datetime


def append_sale(db: Session, product_id: int, quantity: int, price: float, sale_date: datetime) -> Sale:
    """Stage a sale in the caller's transaction. The caller commits."""
    sale = Sale(product_id=product_id, quantity=quantity, price=price, sale_date=sale_date)
    db.add(sale)
    return sale


def window_start(window_days: int, now: datetime) -> datetime:
    if isinstance(window_days, bool) or not isinstance(window_days, int) or window_days < 1:
        raise ValidationError("days must be a positive integer", field="days")
    return now - timedelta(days=window_days)


def sales_in_window(db: Session, window_days: int, now: datetime | None = None) -> list[Sale]:
    """Sales with sale_date >= now - window_days, oldest first."""
    start = window_start(window_days, now or utcnow())
    stmt = select(Sale).where(Sale.sale_date >= start).order_by(Sale.sale_date, Sale.id)
    return list(db.scalars(stmt))


def sales_history(db: Session, window_days: int = 30, limit: int = 100, now: datetime | None = None) -> list[SaleRecord]:
    """Most recent sales first, with the referenced product's current name and SKU."""
    start = window_start(window_days, now or utcnow())
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_HISTORY_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}", field="limit")

    stmt = (
        select(Sale)
        .where(Sale.sale_date >= start)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .limit(limit)
    )
    sales = list(db.scalars(stmt))
    products = products_by_id(db, (s.product_id for s in sales))

    records = []
    for s in sales:
        p = products.get(s.product_id)
        records.append(SaleRecord(
            id=s.id,
            product_id=s.product_id,
            product_name=p.name if p else None,
            product_sku=p.sku if p else None,
            quantity=s.quantity,
            price=s.price,
            total=s.quantity * s.price,
            sale_date=s.sale_date,
        ))
    return records
