from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from fastapi.responses import FileResponse
import logging
import math
import pandas as pd
from pathlib import Path
import uuid

from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db
from app.inventory.store import add_products, normalize_sku, sku_exists

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

REQUIRED_PRODUCTS = {"name", "sku", "quantity", "price"}
OPTIONAL_PRODUCTS = {"reorder_level"}

ERROR_DIR = Path(settings.ERROR_REPORT_DIR)
PREVIEW_ROWS = 25

def read_csv(upload: UploadFile) -> pd.DataFrame:
    filename = upload.filename or ""
    if not filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail=f"{filename} must be a CSV")
    try:
        # keep raw strings so "5.5" is reported instead of silently truncated
        return pd.read_csv(upload.file, dtype=str, keep_default_na=False)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"{filename}: could not read CSV: {e}")

def missing_cols(df: pd.DataFrame, required: set[str]) -> list[str]:
    return sorted(list(required - set(df.columns)))

def add_error(
    errors: list,
    *,
    file: str,
    row: int | None,
    field: str,
    code: str,
    message: str,
    value: str = "",
    suggestion: str = "",
):
    errors.append({
        "file": file,
        "row": row,
        "field": field,
        "code": code,
        "message": message,
        "value": value,
        "suggestion": suggestion,
    })

def write_error_report(errors: list[dict]) -> str:
    ERROR_DIR.mkdir(parents=True, exist_ok=True)
    report_id = uuid.uuid4().hex
    pd.DataFrame(errors).to_csv(ERROR_DIR / f"{report_id}.csv", index=False)
    return report_id

def error_payload(errors: list[dict], rows: int) -> dict:
    report_id = write_error_report(errors)
    return {
        "ok": False,
        "summary": {"products_rows": rows},
        "errors_count": len(errors),
        "error_report_id": report_id,
        "error_report_url": f"/import/error-report/{report_id}",
        "errors_preview": errors[:PREVIEW_ROWS],
    }

def validate_products(df: pd.DataFrame, filename: str, db: Session) -> tuple[list[dict], list[dict]]:
    """Return (errors, clean rows ready for add_products)."""
    errors: list[dict] = []

    mp = missing_cols(df, REQUIRED_PRODUCTS)
    if mp:
        add_error(errors, file=filename, row=None, field="*", code="MISSING_COLUMNS",
                  message="Missing required columns", value=",".join(mp), suggestion="Add these columns to header.")
        return errors, []

    rows: list[dict] = []
    seen: dict[str, int] = {}
    for idx, row in df.iterrows():
        csv_row = int(idx) + 2
        clean = {}

        for field in ("name", "sku"):
            value = str(row[field]).strip()
            if not value:
                add_error(errors, file=filename, row=csv_row, field=field, code="REQUIRED",
                          message=f"{field} is required", suggestion=f"Provide a non-empty {field}.")
            clean[field] = value

        try:
            clean["quantity"] = int(row["quantity"])
            if clean["quantity"] < 0:
                raise ValueError()
        except ValueError:
            add_error(errors, file=filename, row=csv_row, field="quantity", code="BAD_INT",
                      message="quantity must be an integer >= 0", value=str(row["quantity"]))

        try:
            clean["price"] = float(row["price"])
            if clean["price"] < 0 or not math.isfinite(clean["price"]):
                raise ValueError()
        except ValueError:
            add_error(errors, file=filename, row=csv_row, field="price", code="BAD_NUMBER",
                      message="price must be a finite number >= 0", value=str(row["price"]))

        raw_level = str(row.get("reorder_level", "")).strip()
        if raw_level:
            try:
                clean["reorder_level"] = int(raw_level)
                if clean["reorder_level"] < 0:
                    raise ValueError()
            except ValueError:
                add_error(errors, file=filename, row=csv_row, field="reorder_level", code="BAD_INT",
                          message="reorder_level must be an integer >= 0", value=raw_level)

        if clean["sku"]:
            sku = normalize_sku(clean["sku"])
            if sku in seen:
                add_error(errors, file=filename, row=csv_row, field="sku", code="DUPLICATE_IN_FILE",
                          message=f"sku repeats row {seen[sku]}", value=sku, suggestion="Keep one row per sku.")
            elif sku_exists(db, sku):
                add_error(errors, file=filename, row=csv_row, field="sku", code="SKU_EXISTS",
                          message="sku already exists", value=sku,
                          suggestion="Remove the row or adjust quantity via the products API.")
            seen.setdefault(sku, csv_row)

        rows.append(clean)

    return errors, rows

@router.get("/error-report/{report_id}")
def download_error_report(report_id: str):
    path = ERROR_DIR / f"{report_id}.csv"
    if not report_id.isalnum() or not path.exists():
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="import_error_report.csv")

@router.post("/validate")
def validate_import(products: UploadFile = File(...), db: Session = Depends(get_db)):
    df = read_csv(products)
    errors, _ = validate_products(df, products.filename, db)
    if errors:
        return error_payload(errors, len(df))

    return {
        "ok": True,
        "summary": {"products_rows": int(len(df))},
        "errors_count": 0,
        "errors_preview": [],
    }

@router.post("/commit")
def commit_import(products: UploadFile = File(...), db: Session = Depends(get_db)):
    df = read_csv(products)
    errors, rows = validate_products(df, products.filename, db)
    if errors:
        payload = error_payload(errors, len(df))
        raise HTTPException(status_code=400, detail={"message": "Validation failed. Run /import/validate first.", **payload})

    created = add_products(db, rows)
    logger.info("Committed import of %s (%d products)", products.filename, len(created))
    return {
        "ok": True,
        "saved": {"products_created": len(created)},
    }
