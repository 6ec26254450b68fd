"""Email channel port.

Mirrors the mail provider contract ``send_email({to, subject, text, html})``.
Rendering of rich HTML templates happens outside this storefront.
"""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, text: str, html: str | None = None) -> dict:
        """Send one email.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
