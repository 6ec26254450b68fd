"""Product creation — command and handler.

The product is persisted first; search indexing afterwards is best-effort
and never blocks creation.
"""

from pydantic import BaseModel, Field

from catalogue.product.product import Product, ProductRepository, ProductVariant
from catalogue.search import get_indexer
from catalogue.utils.logging import logger


class VariantSpec(BaseModel):
    size: str | None = None
    color: str | None = None
    sku: str | None = None
    price: float | None = None
    inventory: int = 0


class CreateProduct(BaseModel):
    name: str
    description: str = ""
    category: str | None = None
    brand: str | None = None
    images: list[str] = Field(default_factory=list)
    price: float
    inventory: int = 0
    variants: list[VariantSpec] = Field(default_factory=list)


def index_product_quietly(product: Product) -> bool:
    try:
        get_indexer().index_product(product)
        return True
    except Exception as e:
        logger.error("search_indexing_failed", product_id=product.id, error=str(e))
        return False


class CreateProductHandler:
    def create_product(self, command: CreateProduct) -> Product:
        product = Product(
            name=command.name,
            description=command.description,
            category=command.category,
            brand=command.brand,
            images=command.images,
            price=command.price,
            inventory=command.inventory,
            variants=[ProductVariant(**v.model_dump()) for v in command.variants],
        )
        product.sync_inventory()
        product.check_invariants()

        ProductRepository().add(product)
        logger.info("product_created", product_id=product.id, name=product.name)

        index_product_quietly(product)
        return product
