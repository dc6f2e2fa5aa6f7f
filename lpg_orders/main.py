import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

# IMPORTANT:
# This imports ALL models so SQLAlchemy registers tables + FKs correctly
import lpg_orders.models  # noqa: F401
from lpg_orders.core.config import settings
from lpg_orders.core.db import init_models
from lpg_orders.core.logger import setup_logging
from lpg_orders.schemas.common import ErrorOut
from lpg_orders.services.errors import PricingError

# Routers
from lpg_orders.routers.products import router as products_router
from lpg_orders.routers.coupons import router as coupons_router
from lpg_orders.routers.orders import router as orders_router
from lpg_orders.routers.simple_order import router as simple_order_router

from lpg_orders.routers.admin_products import router as admin_products_router
from lpg_orders.routers.admin_coupons import router as admin_coupons_router
from lpg_orders.routers.admin_orders import router as admin_orders_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    logger.info(f"Order service started (commit mode: {settings.ORDER_COMMIT_MODE})")
    yield


app = FastAPI(title="LPG Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorOut(error=exc.message).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ErrorOut(error="An internal error occurred").model_dump(),
    )


@app.get("/health")
async def health():
    return {"ok": True}


# Public
app.include_router(products_router)
app.include_router(coupons_router)
app.include_router(orders_router)
app.include_router(simple_order_router)

# Admin
app.include_router(admin_products_router)
app.include_router(admin_coupons_router)
app.include_router(admin_orders_router)
