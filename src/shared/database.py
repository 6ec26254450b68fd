"""MongoDB access.

A single ``pymongo`` database handle is shared by all repositories. Tests
swap it for a ``mongomock`` database through ``set_database()``.
"""

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from shared.config import get_settings

_client: MongoClient | None = None
_database: Database | None = None


def get_database() -> Database:
    """Return the active database, connecting with the configured URI on first use."""
    global _client, _database
    if _database is None:
        settings = get_settings()
        _client = MongoClient(settings.mongodb_uri)
        _database = _client[settings.mongodb_database]
    return _database


def set_database(database: Database) -> None:
    global _database
    _database = database


def reset_database() -> None:
    global _client, _database
    if _client is not None:
        _client.close()
    _client = None
    _database = None


# Collection name -> list of (keys, options)
INDEXES = {
    "products": [
        ([("popularity_score", DESCENDING)], {}),
        ([("category", ASCENDING)], {}),
    ],
    "product_events": [
        ([("product_id", ASCENDING), ("created_at", DESCENDING)], {}),
    ],
    "carts": [
        ([("user_id", ASCENDING)], {"sparse": True}),
        ([("session_id", ASCENDING)], {"sparse": True}),
    ],
    "orders": [
        ([("order_number", ASCENDING)], {"unique": True}),
        ([("user_id", ASCENDING), ("created_at", DESCENDING)], {}),
        ([("payment_reference", ASCENDING)], {"sparse": True}),
    ],
    "users": [
        ([("email", ASCENDING)], {}),
    ],
    "reviews": [
        ([("user_id", ASCENDING), ("product_id", ASCENDING)], {"unique": True}),
        ([("product_id", ASCENDING), ("status", ASCENDING)], {}),
    ],
    "refund_requests": [
        ([("order_id", ASCENDING), ("user_id", ASCENDING)], {"unique": True}),
        ([("status", ASCENDING)], {}),
    ],
    "sms_queue": [
        ([("status", ASCENDING), ("priority", ASCENDING), ("scheduled_at", ASCENDING)], {}),
    ],
    "sms_logs": [
        ([("created_at", DESCENDING)], {}),
    ],
    "notification_tasks": [
        ([("status", ASCENDING)], {}),
    ],
}


def ensure_indexes(database: Database | None = None) -> None:
    """Create every index the repositories rely on, including uniqueness constraints."""
    database = database if database is not None else get_database()
    for collection_name, indexes in INDEXES.items():
        for keys, options in indexes:
            database[collection_name].create_index(keys, **options)


def drop_database(database: Database | None = None) -> None:
    database = database if database is not None else get_database()
    for collection_name in database.list_collection_names():
        database.drop_collection(collection_name)
