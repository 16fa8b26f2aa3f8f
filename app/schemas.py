from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProductIn(BaseModel):
    name: str
    sku: str
    quantity: int
    price: float
    reorder_level: int | None = None


class QuantityIn(BaseModel):
    quantity: int


class SaleIn(BaseModel):
    product_id: int
    quantity: int
    price: float | None = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sku: str
    quantity: int
    price: float
    reorder_level: int
    last_sold_at: datetime | None
    created_at: datetime
    updated_at: datetime


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    price: float
    sale_date: datetime


class ProductAdded(BaseModel):
    message: str = "Product added successfully"
    product: ProductOut


class QuantityUpdated(BaseModel):
    message: str = "Quantity updated"
    product: ProductOut


class ProductDeleted(BaseModel):
    message: str = "Product deleted successfully"
    product_id: int


class SaleRecorded(BaseModel):
    message: str = "Sale recorded successfully"
    sale: SaleOut
    product: ProductOut
