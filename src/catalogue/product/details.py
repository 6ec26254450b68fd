"""Product detail updates and removal — commands and handler."""

from pydantic import BaseModel

from catalogue.product.creation import VariantSpec, index_product_quietly
from catalogue.product.product import ProductRepository, ProductVariant
from catalogue.search import get_indexer
from catalogue.utils.logging import logger
from shared.document import utcnow


class UpdateProduct(BaseModel):
    product_id: str
    name: str | None = None
    description: str | None = None
    category: str | None = None
    brand: str | None = None
    images: list[str] | None = None
    price: float | None = None
    inventory: int | None = None
    variants: list[VariantSpec] | None = None
    is_active: bool | None = None


class DeleteProduct(BaseModel):
    product_id: str


class ProductDetailsHandler:
    def update_product(self, command: UpdateProduct):
        repo = ProductRepository()
        product = repo.get(command.product_id)

        changes = command.model_dump(exclude={"product_id", "variants"}, exclude_none=True)
        for field, value in changes.items():
            setattr(product, field, value)

        if command.variants is not None:
            existing = {(v.size, v.color): v for v in product.variants}
            variants = []
            for data in command.variants:
                # Keep variant ids stable so carts and orders still resolve them
                current = existing.get((data.size, data.color))
                variant = ProductVariant(**data.model_dump())
                if current is not None:
                    variant.id = current.id
                variants.append(variant)
            product.variants = variants

        product.sync_inventory()
        product.check_invariants()
        product.updated_at = utcnow()
        product.inventory_version += 1
        repo.add(product)

        index_product_quietly(product)
        return product

    def delete_product(self, command: DeleteProduct) -> None:
        repo = ProductRepository()
        repo.get(command.product_id)
        repo.delete(command.product_id)
        logger.info("product_deleted", product_id=command.product_id)

        try:
            get_indexer().remove_product(command.product_id)
        except Exception as e:
            logger.error("search_removal_failed", product_id=command.product_id, error=str(e))
