from dataclasses import asdict, fields

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.inventory import analytics, ledger
from app.inventory.ledger import MAX_HISTORY_LIMIT, SaleRecord
from app.inventory.analytics import SalesSummary
from app.inventory.sales import record_sale
from app.schemas import ProductOut, SaleIn, SaleOut, SaleRecorded

router = APIRouter()

EXPORT_COLUMNS = [f.name for f in fields(SaleRecord)]


@router.post("", response_model=SaleRecorded)
def create_sale(body: SaleIn, db: Session = Depends(get_db)):
    result = record_sale(db, body.product_id, body.quantity, body.price)
    return SaleRecorded(
        sale=SaleOut.model_validate(result.sale),
        product=ProductOut.model_validate(result.product),
    )


@router.get("/history", response_model=list[SaleRecord])
def sales_history(
    days: int = Query(default=30, ge=1, le=365),
    limit: int = Query(default=100, ge=1, le=MAX_HISTORY_LIMIT),
    db: Session = Depends(get_db),
):
    return ledger.sales_history(db, days, limit)


@router.get("/summary", response_model=SalesSummary)
def sales_summary(days: int = Query(default=30, ge=1, le=365), db: Session = Depends(get_db)):
    return analytics.sales_summary(db, days)


@router.get("/export")
def export_sales(
    days: int = Query(default=30, ge=1, le=365),
    limit: int = Query(default=MAX_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT),
    db: Session = Depends(get_db),
):
    records = ledger.sales_history(db, days, limit)
    df = pd.DataFrame([asdict(r) for r in records], columns=EXPORT_COLUMNS)
    return Response(
        content=df.to_csv(index=False),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="sales_last_{days}_days.csv"'},
    )
