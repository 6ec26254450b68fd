"""FastAPI routes for the Catalogue domain — products, analytics and admin product management."""

from fastapi import APIRouter, Depends

from catalogue.api.schemas import ProductEventRequest, ProductRequest, ProductUpdateRequest
from catalogue.product.analytics import PUBLIC_EVENT_TYPES, recalculate_popularity, record_product_event, trending_products
from catalogue.product.creation import CreateProduct, CreateProductHandler
from catalogue.product.details import DeleteProduct, ProductDetailsHandler, UpdateProduct
from catalogue.product.product import ProductRepository
from identity.auth import CurrentUser, get_optional_user, require_admin
from shared.exceptions import ObjectNotFoundError, ValidationError

# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("/trending")
async def get_trending_products(limit: int = 12) -> dict:
    products = trending_products(limit=max(1, min(limit, 50)))
    return {"products": [p.to_dict() for p in products]}


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    product = ProductRepository().find_one({"_id": product_id, "is_active": True})
    if product is None:
        raise ObjectNotFoundError({"product": ["Product not found"]})
    return {"product": product.to_dict()}


@product_router.post("/{product_id}/analytics")
async def record_analytics(
    product_id: str, body: ProductEventRequest, user: CurrentUser | None = Depends(get_optional_user)
) -> dict:
    if body.event_type not in PUBLIC_EVENT_TYPES:
        raise ValidationError({"event_type": ["Invalid event type"]})
    ProductRepository().get(product_id)
    record_product_event(product_id, body.event_type, quantity=body.quantity, user_id=user.user_id if user else None)
    return {"success": True}


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_product_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_product_router.post("/products", status_code=201)
async def create_product(body: ProductRequest) -> dict:
    product = CreateProductHandler().create_product(CreateProduct(**body.model_dump()))
    return {"product": product.to_dict()}


@admin_product_router.put("/products/{product_id}")
async def update_product(product_id: str, body: ProductUpdateRequest) -> dict:
    product = ProductDetailsHandler().update_product(UpdateProduct(product_id=product_id, **body.model_dump()))
    return {"product": product.to_dict()}


@admin_product_router.delete("/products/{product_id}")
async def delete_product(product_id: str) -> dict:
    ProductDetailsHandler().delete_product(DeleteProduct(product_id=product_id))
    return {"success": True}


@admin_product_router.post("/analytics/recalc")
async def recalculate_analytics() -> dict:
    return {"success": True, "updated": recalculate_popularity()}
