"""In-memory search indexer for development and testing."""

from catalogue.product.product import Product
from catalogue.search.port import SearchIndexer


class FakeSearchIndexer(SearchIndexer):
    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def configure(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    def index_product(self, product: Product) -> None:
        self.calls.append({"method": "index_product", "product_id": product.id})
        if self.should_fail:
            raise ConnectionError("Search index unavailable")
        self.documents[product.id] = {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "category": product.category,
            "brand": product.brand,
            "price": product.price,
        }

    def remove_product(self, product_id: str) -> None:
        self.calls.append({"method": "remove_product", "product_id": product_id})
        if self.should_fail:
            raise ConnectionError("Search index unavailable")
        self.documents.pop(product_id, None)
