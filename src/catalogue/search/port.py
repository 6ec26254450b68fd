"""Search indexer port.

Keeps a separate product search index current. Indexing is best-effort:
callers log failures and carry on.
"""

from abc import ABC, abstractmethod

from catalogue.product.product import Product


class SearchIndexer(ABC):
    """Abstract search index interface."""

    @abstractmethod
    def index_product(self, product: Product) -> None:
        """Add or replace a product in the search index."""
        ...

    @abstractmethod
    def remove_product(self, product_id: str) -> None:
        """Remove a product from the search index."""
        ...
