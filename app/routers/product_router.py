from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db
from app.inventory import analytics, store
from app.schemas import ProductAdded, ProductDeleted, ProductIn, ProductOut, QuantityIn, QuantityUpdated

router = APIRouter()
settings = get_settings()


@router.get("", response_model=list[ProductOut])
def list_products(sort: str | None = None, db: Session = Depends(get_db)):
    return analytics.list_products(db, sort)


@router.post("", response_model=ProductAdded, status_code=201)
def add_product(body: ProductIn, db: Session = Depends(get_db)):
    product = store.add_product(db, body.name, body.sku, body.quantity, body.price, body.reorder_level)
    return ProductAdded(product=ProductOut.model_validate(product))


@router.get("/search", response_model=list[ProductOut])
def search_products(
    query: str | None = None,
    status: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    db: Session = Depends(get_db),
):
    return analytics.search_products(db, query, status, sort_by, dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock(db: Session = Depends(get_db)):
    return analytics.list_by_category(db, "low-stock", dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/dead-stock", response_model=list[ProductOut])
def dead_stock(db: Session = Depends(get_db)):
    return analytics.list_by_category(db, "dead-stock", dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/category/{category}", response_model=list[ProductOut])
def by_category(category: str, db: Session = Depends(get_db)):
    return analytics.list_by_category(db, category, dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return store.get_product(db, product_id)


@router.put("/{product_id}/quantity", response_model=QuantityUpdated)
def update_quantity(product_id: int, body: QuantityIn, db: Session = Depends(get_db)):
    product = store.update_quantity(db, product_id, body.quantity)
    return QuantityUpdated(product=ProductOut.model_validate(product))


@router.delete("/{product_id}", response_model=ProductDeleted)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    return ProductDeleted(product_id=store.delete_product(db, product_id))
