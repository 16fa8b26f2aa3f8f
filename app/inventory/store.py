"""Product store: creation, lookup, listing and stock mutations."""

import logging
import math
from numbers import Real

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.models import Product, utcnow
from app.inventory.errors import DuplicateSku, NotFound, ValidationError

logger = logging.getLogger(__name__)


def normalize_sku(sku: str) -> str:
    return sku.strip().upper()


def require_int(name: str, value, *, minimum: int) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", field=name)
    if value < minimum:
        raise ValidationError(f"{name} must be an integer >= {minimum}", field=name)
    return value


def require_price(value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError("price must be a number", field="price")
    if value < 0:
        raise ValidationError("price must be >= 0", field="price")
    if not math.isfinite(value):
        raise ValidationError("price must be a finite number", field="price")
    return float(value)


def build_product(name, sku, quantity, price, reorder_level=None) -> Product:
    """Validate raw fields and return an unsaved Product."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("name is required", field="name")
    if not isinstance(sku, str) or not sku.strip():
        raise ValidationError("sku is required", field="sku")
    if reorder_level is None:
        reorder_level = get_settings().DEFAULT_REORDER_LEVEL

    now = utcnow()
    return Product(
        name=name.strip(),
        sku=normalize_sku(sku),
        quantity=require_int("quantity", quantity, minimum=0),
        price=require_price(price),
        reorder_level=require_int("reorder_level", reorder_level, minimum=0),
        last_sold_at=None,
        created_at=now,
        updated_at=now,
    )


def sku_exists(db: Session, sku: str) -> bool:
    return db.scalar(select(Product.id).where(Product.sku == normalize_sku(sku))) is not None


def add_product(db: Session, name, sku, quantity, price, reorder_level=None) -> Product:
    product = build_product(name, sku, quantity, price, reorder_level)
    if sku_exists(db, product.sku):
        raise DuplicateSku(product.sku)

    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # lost a race with another insert of the same SKU
        if sku_exists(db, product.sku):
            raise DuplicateSku(product.sku) from None
        raise
    db.refresh(product)
    logger.info("Added product %s (id=%s, qty=%s)", product.sku, product.id, product.quantity)
    return product


def add_products(db: Session, rows: list[dict]) -> list[Product]:
    """Insert many products in a single transaction; all or nothing."""
    products = [
        build_product(r.get("name"), r.get("sku"), r.get("quantity"), r.get("price"), r.get("reorder_level"))
        for r in rows
    ]
    seen = set()
    for p in products:
        if p.sku in seen or sku_exists(db, p.sku):
            raise DuplicateSku(p.sku)
        seen.add(p.sku)

    db.add_all(products)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        taken = [p.sku for p in products if sku_exists(db, p.sku)]
        if taken:
            raise DuplicateSku(",".join(taken)) from None
        raise
    for p in products:
        db.refresh(p)
    logger.info("Imported %d products", len(products))
    return products


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFound(product_id)
    return product


def all_products(db: Session) -> list[Product]:
    return list(db.scalars(select(Product).order_by(Product.id)))


def products_by_id(db: Session, product_ids) -> dict[int, Product]:
    ids = set(product_ids)
    if not ids:
        return {}
    return {p.id: p for p in db.scalars(select(Product).where(Product.id.in_(ids)))}


def update_quantity(db: Session, product_id: int, new_quantity) -> Product:
    new_quantity = require_int("quantity", new_quantity, minimum=0)
    product = get_product(db, product_id)
    product.quantity = new_quantity
    product.updated_at = utcnow()
    db.commit()
    db.refresh(product)
    logger.info("Set quantity of %s (id=%s) to %s", product.sku, product.id, new_quantity)
    return product


def delete_product(db: Session, product_id: int) -> int:
    """Delete a product. Its sales stay in the ledger with a dangling reference."""
    product = get_product(db, product_id)
    sku = product.sku
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s (id=%s)", sku, product_id)
    return product_id
