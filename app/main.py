import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.db.session import init_db
from app.inventory.errors import InventoryError
from app.routers.dashboard_router import router as dashboard_router
from app.routers.import_router import router as import_router
from app.routers.insight_router import router as insight_router
from app.routers.product_router import router as product_router
from app.routers.sale_router import router as sale_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("StockSmart API started")
    yield


app = FastAPI(title="StockSmart API v1", lifespan=lifespan)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/")
def root():
    return {"ok": True, "service": "stocksmart", "module": "inventory"}


@app.get("/health")
def health():
    return {"status": "OK", "message": "Server is running"}


app.include_router(product_router, prefix="/api/products", tags=["products"])
app.include_router(sale_router, prefix="/api/sales", tags=["sales"])
app.include_router(dashboard_router, prefix="/api", tags=["dashboard"])
app.include_router(insight_router, prefix="/api/ai", tags=["ai"])
app.include_router(import_router, prefix="/import", tags=["import"])
