"""Resolve where to reach a customer about an order."""

from dataclasses import dataclass

from identity.user.user import User


@dataclass(frozen=True)
class ContactDetails:
    name: str
    email: str | None = None
    phone: str | None = None


def resolve_contact(user: User | None, shipping_address: dict | None = None) -> ContactDetails:
    """Phone comes from the user record, falling back to the order's recipient phone."""
    shipping_address = shipping_address or {}
    phone = (user.phone if user else None) or shipping_address.get("recipient_phone") or None
    email = user.email if user else None
    name = user.full_name if user else (shipping_address.get("recipient_name") or "Customer")
    return ContactDetails(name=name, email=email, phone=phone)
