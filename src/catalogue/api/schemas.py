"""Pydantic request schemas for the Catalogue API."""

from pydantic import BaseModel, Field

from catalogue.product.creation import VariantSpec


class ProductRequest(BaseModel):
    name: str
    description: str = ""
    category: str | None = None
    brand: str | None = None
    images: list[str] = Field(default_factory=list)
    price: float = Field(ge=0)
    inventory: int = Field(default=0, ge=0)
    variants: list[VariantSpec] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Kente Print Shirt",
                    "category": "men",
                    "brand": "ThePlug",
                    "price": 250.0,
                    "variants": [
                        {"size": "M", "color": "Gold", "inventory": 5},
                        {"size": "L", "color": "Gold", "inventory": 3},
                    ],
                }
            ]
        }
    }


class ProductUpdateRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    brand: str | None = None
    images: list[str] | None = None
    price: float | None = Field(default=None, ge=0)
    inventory: int | None = Field(default=None, ge=0)
    variants: list[VariantSpec] | None = None
    is_active: bool | None = None


class ProductEventRequest(BaseModel):
    event_type: str
    quantity: int = Field(default=1, ge=1)

    model_config = {"json_schema_extra": {"examples": [{"event_type": "view"}]}}
