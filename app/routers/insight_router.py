from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db
from app.inventory.insights import (
    GeminiInsightClient,
    InsightGenerator,
    InsightReport,
    InsightServiceStatus,
    check_insight_service,
    generate_insights,
)

router = APIRouter()
settings = get_settings()


def get_insight_generator() -> InsightGenerator:
    return GeminiInsightClient.from_settings(settings)


@router.post("/insights", response_model=InsightReport)
def insights(
    db: Session = Depends(get_db),
    generator: InsightGenerator = Depends(get_insight_generator),
):
    return generate_insights(db, generator, dead_stock_days=settings.DEAD_STOCK_DAYS)


@router.get("/status", response_model=InsightServiceStatus)
def insight_status(generator: InsightGenerator = Depends(get_insight_generator)):
    return check_insight_service(generator)
