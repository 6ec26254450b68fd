"""SMS channel port — abstract interface for SMS dispatch."""

import re
from abc import ABC, abstractmethod

_GHANA_LOCAL = re.compile(r"^0\d{9}$")
_GHANA_INTERNATIONAL = re.compile(r"^\+233\d{9}$")

INVALID_NUMBER_MESSAGE = "Only Ghana numbers are allowed (start with 0 or +233)."


def is_deliverable_number(number: str) -> bool:
    """The SMS provider only delivers to Ghana numbers: 0XXXXXXXXX or +233XXXXXXXXX."""
    number = (number or "").strip()
    return bool(_GHANA_LOCAL.match(number) or _GHANA_INTERNATIONAL.match(number))


class SMSPort(ABC):
    """Abstract interface for SMS dispatch adapters."""

    @abstractmethod
    def send(self, to: str, body: str) -> dict:
        """Send an SMS message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
