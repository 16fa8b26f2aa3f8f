"""
Stock alerts derived from the current product table.

Alerts are recomputed on every query and never stored. Acknowledging an alert
is accepted but NOT persisted: the next query returns the same alert with
``acknowledged=False`` again. ``AlertAcknowledgement.persisted`` makes that
explicit to callers.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.db.models import utcnow
from app.inventory import classifier
from app.inventory.errors import ValidationError
from app.inventory.store import all_products

CRITICAL = "critical"
WARNING = "warning"


@dataclass
class Alert:
    id: str
    type: str
    title: str
    message: str
    product_id: int
    timestamp: datetime
    acknowledged: bool = False


@dataclass
class AlertAcknowledgement:
    alert_id: str
    acknowledged: bool = True
    persisted: bool = False
    message: str = "Alert acknowledged (not persisted; it will be reported again while the condition holds)"


def _stock_alert(product, now: datetime) -> Alert | None:
    # out-of-stock and low-stock are exclusive here since low-stock requires quantity > 0
    if classifier.is_out_of_stock(product):
        return Alert(
            id=f"{product.id}-outofstock",
            type=CRITICAL,
            title="Out of Stock",
            message=f"{product.name} ({product.sku}) is completely out of stock! Immediate reorder required.",
            product_id=product.id,
            timestamp=now,
        )
    if classifier.is_low_stock(product):
        return Alert(
            id=f"{product.id}-lowstock",
            type=WARNING,
            title="Low Stock Alert",
            message=(
                f"{product.name} ({product.sku}) is running low: only {product.quantity} units "
                f"remaining (reorder at {product.reorder_level})"
            ),
            product_id=product.id,
            timestamp=now,
        )
    return None


def _dead_stock_alert(product, now: datetime, dead_stock_days: int) -> Alert | None:
    if not classifier.is_dead_stock(product, now, dead_stock_days):
        return None
    if product.last_sold_at is None:
        idle = "has never sold"
    else:
        idle = f"hasn't sold in {(now - product.last_sold_at).days} days"
    return Alert(
        id=f"{product.id}-deadstock",
        type=WARNING,
        title="Dead Stock Detected",
        message=f"{product.name} ({product.sku}) {idle}. Consider discount or discontinuation.",
        product_id=product.id,
        timestamp=now,
    )


def generate_alerts(products, now: datetime, dead_stock_days: int = classifier.DEAD_STOCK_DAYS) -> list[Alert]:
    """Alerts for every product, critical first, otherwise in product order."""
    alerts = []
    for p in products:
        for alert in (_stock_alert(p, now), _dead_stock_alert(p, now, dead_stock_days)):
            if alert is not None:
                alerts.append(alert)
    # sorted() is stable, so insertion order survives within each type
    return sorted(alerts, key=lambda a: a.type != CRITICAL)


def get_alerts(db: Session, now: datetime | None = None, dead_stock_days: int = classifier.DEAD_STOCK_DAYS) -> list[Alert]:
    return generate_alerts(all_products(db), now or utcnow(), dead_stock_days)


def acknowledge_alert(alert_id: str) -> AlertAcknowledgement:
    if not alert_id or not alert_id.strip():
        raise ValidationError("alert id is required", field="alert_id")
    return AlertAcknowledgement(alert_id=alert_id)
