"""User documents mirrored from the identity provider.

Authentication itself happens upstream; this context only keeps the
contact details and role the storefront needs (email, phone, admin flag).
"""

import re
from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator

from shared.document import Document, utcnow
from shared.repository import Repository


class UserRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")


class User(Document):
    email: str | None = None
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    role: UserRole = UserRole.CUSTOMER
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, value: str | None) -> str | None:
        if value in (None, ""):
            return None
        if not re.search(r"\d", value) or not _PHONE_PATTERN.match(value):
            raise ValueError(f"Invalid phone number: {value!r}")
        return value.strip()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Customer"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class UserRepository(Repository[User]):
    model = User
    collection_name = "users"

    def get_or_none(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return self.find_one({"_id": user_id})
