"""Base model for documents persisted in MongoDB.

Documents are pydantic models. The identifier is stored as ``_id``.
Datetimes are kept timezone-aware (UTC) in memory and stored as naive UTC,
which is what the MongoDB driver hands back on reads.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_aware(value: Any) -> Any:
    """Recursively attach UTC to naive datetimes."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value
    if isinstance(value, dict):
        return {k: as_aware(v) for k, v in value.items()}
    if isinstance(value, list):
        return [as_aware(v) for v in value]
    return value


def as_naive(value: Any) -> Any:
    """Recursively convert aware datetimes to naive UTC for storage and queries."""
    if isinstance(value, datetime):
        return value.astimezone(UTC).replace(tzinfo=None) if value.tzinfo is not None else value
    if isinstance(value, dict):
        return {k: as_naive(v) for k, v in value.items()}
    if isinstance(value, list):
        return [as_naive(v) for v in value]
    return value


def new_id() -> str:
    return str(uuid4())


class Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_default=True)

    id: str = Field(default_factory=new_id, alias="_id")

    @model_validator(mode="before")
    @classmethod
    def _load_datetimes_as_utc(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return as_aware(data)
        return data

    @classmethod
    def from_document(cls, document: dict):
        return cls.model_validate(document)

    def to_document(self) -> dict:
        return as_naive(self.model_dump(by_alias=True))

    def to_dict(self) -> dict:
        """JSON-friendly representation used by API responses."""
        return self.model_dump(mode="json")
