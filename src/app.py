"""Storefront FastAPI application.

Single web server for every bounded context. Handlers run synchronously
against MongoDB; customer notifications run as background tasks after
the response is sent.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.api import admin_product_router, product_router
from identity.api.routes import admin_user_router, profile_router
from notifications.api.routes import admin_sms_router, cron_router
from ordering.api.routes import admin_order_router, cart_router, checkout_router, order_router
from payments.api.routes import admin_refund_router, gateway_router, refund_router
from reviews.api.routes import admin_review_router, product_review_router, review_router
from shared.api import register_exception_handlers
from shared.config import get_settings
from shared.database import ensure_indexes
from shared.logging import configure_logging

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Fashion storefront — carts, checkout, orders, refunds, reviews and SMS notifications",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().store_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
# Static product paths (/products/trending) are registered before /products/{id}
app.include_router(product_router)
app.include_router(product_review_router)
app.include_router(review_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(refund_router)
app.include_router(checkout_router)
app.include_router(profile_router)
app.include_router(cron_router)

app.include_router(admin_product_router)
app.include_router(admin_order_router)
app.include_router(admin_refund_router)
app.include_router(admin_review_router)
app.include_router(admin_sms_router)
app.include_router(admin_user_router)

if get_settings().allows_dev_tools:
    app.include_router(gateway_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "environment": get_settings().env})
