import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import mongomock
import pytest

os.environ.setdefault("STOREFRONT_ENV", "test")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir())))


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Give every test a fresh in-memory database and fresh collaborators."""
    from catalogue.search import reset_indexer
    from notifications.channel import reset_channels
    from payments.gateway import reset_gateway
    from shared.config import reset_settings
    from shared.database import ensure_indexes, reset_database, set_database

    reset_settings()
    database = mongomock.MongoClient().db
    set_database(database)
    ensure_indexes(database)

    yield database

    reset_gateway()
    reset_channels()
    reset_indexer()
    reset_database()
    reset_settings()


@pytest.fixture
def db(run_around_tests):
    return run_around_tests


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture
def gateway():
    from payments.gateway import get_gateway

    return get_gateway()


@pytest.fixture
def sms_channel():
    from notifications.channel import get_channel

    return get_channel("sms")


@pytest.fixture
def email_channel():
    from notifications.channel import get_channel

    return get_channel("email")


@pytest.fixture
def indexer():
    from catalogue.search import get_indexer

    return get_indexer()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture
def make_user():
    from identity.user.user import User, UserRepository

    def _make(**fields):
        defaults = {
            "email": "ama@example.com",
            "first_name": "Ama",
            "last_name": "Mensah",
            "phone": "0241234567",
        }
        user = User(**{**defaults, **fields})
        UserRepository().add(user)
        return user

    return _make


@pytest.fixture
def make_product():
    from catalogue.product.product import Product, ProductRepository, ProductVariant

    def _make(name="Kente Shirt", price=1000.0, inventory=10, variants=None, **fields):
        product = Product(
            name=name,
            price=price,
            inventory=inventory,
            variants=[ProductVariant(**v) for v in (variants or [])],
            **fields,
        )
        product.sync_inventory()
        ProductRepository().add(product)
        return product

    return _make


@pytest.fixture
def make_cart():
    from ordering.cart.cart import Cart, CartItem, CartRepository

    def _make(items, user_id=None, session_id=None):
        cart = Cart.create(user_id=user_id, session_id=session_id if not user_id else None)
        for product, quantity, *rest in items:
            variant = product.find_variant(rest[0]) if rest else None
            cart.add_item(
                CartItem(
                    product_id=product.id,
                    variant_id=variant.id if variant else None,
                    name=product.name,
                    size=variant.size if variant else None,
                    color=variant.color if variant else None,
                    quantity=quantity,
                    price=product.current_price(variant.id if variant else None),
                )
            )
        CartRepository().add(cart)
        return cart

    return _make


@pytest.fixture
def shipping_address():
    from ordering.order.order import ShippingAddress

    return ShippingAddress(
        recipient_name="Ama Mensah",
        recipient_phone="0241234567",
        street="12 Oxford Street",
        city="Accra",
    )


@pytest.fixture
def make_order(shipping_address):
    from ordering.order.order import Order, OrderItem, OrderRepository, OrderStatus, PaymentDetails, PaymentStatus

    def _make(user_id, lines, paid=False, paid_at=None, status=None, reference="PSK-TEST-0001", **fields):
        items = [
            OrderItem(
                product_id=product.id,
                variant_id=variant_id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.current_price(variant_id),
                total_price=round(product.current_price(variant_id) * quantity, 2),
            )
            for product, quantity, variant_id in (
                (line[0], line[1], line[2] if len(line) > 2 else None) for line in lines
            )
        ]
        pricing = {k: fields.pop(k) for k in ("tax", "shipping", "discount", "payment_method") if k in fields}
        order = Order.create(user_id=user_id, items=items, shipping_address=shipping_address, **pricing)
        for name, value in fields.items():
            setattr(order, name, value)
        if paid:
            order.payment_status = PaymentStatus.PAID.value
            order.status = OrderStatus.CONFIRMED.value
            order.payment_reference = reference
            order.payment_details = PaymentDetails(paid_at=paid_at or datetime.now(UTC) - timedelta(minutes=5))
        if status:
            order.status = status
        OrderRepository().add(order)
        return order

    return _make
