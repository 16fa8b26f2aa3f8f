"""
Typed errors raised by the inventory core.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
the API boundary renders it with, plus structured ``details`` so callers can
catch by type instead of parsing messages.

    InventoryError
    +-- ValidationError        VALIDATION_ERROR       400
    +-- NotFound               NOT_FOUND              404
    +-- DuplicateSku           DUPLICATE_SKU          409
    +-- InsufficientStock      INSUFFICIENT_STOCK     409
    +-- UpstreamUnavailable    UPSTREAM_UNAVAILABLE   503
"""

from typing import Any


class InventoryError(Exception):
    code = "INVENTORY_ERROR"
    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code, **self.details}


class ValidationError(InventoryError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFound(InventoryError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__("Product not found", product_id=product_id)
        self.product_id = product_id


class DuplicateSku(InventoryError):
    code = "DUPLICATE_SKU"
    status_code = 409

    def __init__(self, sku: str):
        super().__init__("SKU already exists", sku=sku)
        self.sku = sku


class InsufficientStock(InventoryError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            "Insufficient stock",
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class UpstreamUnavailable(InventoryError):
    """The text-generation service is unreachable or not configured."""

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503
