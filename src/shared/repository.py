"""Collection-backed repositories.

Each aggregate module declares a subclass naming its document class and
collection. Repositories load and save whole documents; aggregate-specific
atomic updates (``$inc``, conditional claims) live on the subclasses.
"""

from typing import Any, Generic, TypeVar

from pymongo.collection import Collection

from shared.database import get_database
from shared.document import Document, as_naive
from shared.exceptions import ObjectNotFoundError

T = TypeVar("T", bound=Document)


class Repository(Generic[T]):
    model: type[T]
    collection_name: str

    @property
    def collection(self) -> Collection:
        return get_database()[self.collection_name]

    def _load(self, document: dict | None) -> T | None:
        if document is None:
            return None
        return self.model.from_document(document)

    def get(self, identifier: str) -> T:
        obj = self._load(self.collection.find_one({"_id": identifier}))
        if obj is None:
            raise ObjectNotFoundError({"_entity": [f"{self.model.__name__} with id {identifier} does not exist"]})
        return obj

    def find_one(self, query: dict[str, Any]) -> T | None:
        return self._load(self.collection.find_one(as_naive(query)))

    def find(
        self,
        query: dict[str, Any] | None = None,
        sort: list[tuple[str, int]] | None = None,
        limit: int = 0,
        skip: int = 0,
    ) -> list[T]:
        cursor = self.collection.find(as_naive(query or {}))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [self.model.from_document(doc) for doc in cursor]

    def count(self, query: dict[str, Any] | None = None) -> int:
        return self.collection.count_documents(as_naive(query or {}))

    def add(self, obj: T) -> T:
        """Insert or replace the whole document."""
        self.collection.replace_one({"_id": obj.id}, obj.to_document(), upsert=True)
        return obj

    def delete(self, identifier: str) -> bool:
        return self.collection.delete_one({"_id": identifier}).deleted_count == 1

    def delete_many(self, query: dict[str, Any]) -> int:
        return self.collection.delete_many(as_naive(query)).deleted_count
