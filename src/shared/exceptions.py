"""Error taxonomy shared by every bounded context.

Each error carries a ``messages`` dict mapping a field (or ``_entity`` for
errors not tied to a single field) to a list of human-readable messages,
so API handlers can render them uniformly.
"""


class StorefrontError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, messages: dict[str, list[str]] | str):
        if isinstance(messages, str):
            messages = {"_entity": [messages]}
        self.messages = messages
        super().__init__(messages)

    @property
    def message(self) -> str:
        """First message, used as the headline of an error response."""
        for values in self.messages.values():
            if values:
                return values[0]
        return self.__class__.__name__


class ValidationError(StorefrontError):
    """Malformed or missing input. Never retried."""

    status_code = 400


class AuthorizationError(StorefrontError):
    """Missing or insufficient identity. Messages stay generic."""

    status_code = 403


class AuthenticationRequired(AuthorizationError):
    status_code = 401


class ObjectNotFoundError(StorefrontError):
    status_code = 404


class InvalidStateError(StorefrontError):
    """Action attempted against an entity in the wrong lifecycle state."""

    status_code = 409


class ExternalServiceError(StorefrontError):
    """Payment gateway or another collaborator failed."""

    status_code = 502


class PaymentMismatchError(StorefrontError):
    """Verified payment amount differs from the order total."""

    status_code = 400

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__({"amount": [f"Payment amount mismatch: expected {expected}, received {received}"]})
