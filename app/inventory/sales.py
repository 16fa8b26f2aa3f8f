"""
Sale transaction processing.

A sale is one unit of work: a conditional stock decrement and a ledger append
committed together. The decrement is a single

    UPDATE products SET quantity = quantity - :q ... WHERE id = :id AND quantity >= :q

so two concurrent sales of the same product can never both pass the stock
check; the loser matches no row and is rejected with InsufficientStock.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.db.models import Product, Sale, utcnow
from app.inventory.errors import InsufficientStock
from app.inventory.ledger import append_sale
from app.inventory.store import require_int, require_price, get_product

logger = logging.getLogger(__name__)


@dataclass
class SaleResult:
    sale: Sale
    product: Product


def record_sale(
    db: Session,
    product_id: int,
    quantity,
    price=None,
    now: datetime | None = None,
) -> SaleResult:
    quantity = require_int("quantity", quantity, minimum=1)
    if price is not None:
        price = require_price(price)
    now = now or utcnow()

    product = get_product(db, product_id)
    if product.quantity < quantity:
        logger.warning(
            "Rejected sale of %s x%s: only %s in stock", product.sku, quantity, product.quantity
        )
        raise InsufficientStock(product_id, quantity, product.quantity)
    unit_price = product.price if price is None else price

    try:
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity, last_sold_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # stock changed between the read above and the update
            db.rollback()
            db.refresh(product)
            logger.warning("Rejected sale of %s x%s after concurrent update", product.sku, quantity)
            raise InsufficientStock(product_id, quantity, product.quantity)

        sale = append_sale(db, product_id, quantity, unit_price, now)
        db.commit()
    except InsufficientStock:
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    db.refresh(sale)
    logger.info(
        "Recorded sale %s: %s x%s @ %s (remaining %s)",
        sale.id, product.sku, quantity, unit_price, product.quantity,
    )
    return SaleResult(sale=sale, product=product)
