from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db
from app.inventory import alerts
from app.inventory.alerts import Alert, AlertAcknowledgement
from app.inventory.analytics import InventoryStats, get_stats

router = APIRouter()
settings = get_settings()


@router.get("/dashboard/stats", response_model=InventoryStats)
def inventory_stats(db: Session = Depends(get_db)):
    return get_stats(db, dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/alerts", response_model=list[Alert])
def list_alerts(db: Session = Depends(get_db)):
    return alerts.get_alerts(db, dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.put("/alerts/{alert_id}/acknowledge", response_model=AlertAcknowledgement)
def acknowledge_alert(alert_id: str):
    """Acknowledge an alert.

    Acknowledgement is not persisted: the alert is regenerated with
    ``acknowledged=false`` on the next ``GET /api/alerts`` while its
    condition still holds. The response carries ``persisted=false``.
    """
    return alerts.acknowledge_alert(alert_id)
