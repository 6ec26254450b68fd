"""In-memory mail provider used in development and tests."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.outbox: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, to: str, subject: str, text: str, html: str | None = None) -> dict:
        if "@" not in (to or ""):
            return {"message_id": None, "status": "failed", "error": f"Invalid recipient address: {to!r}"}
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"email-{uuid4().hex[:12]}"
        self.outbox.append({"message_id": message_id, "to": to, "subject": subject, "text": text, "html": html})
        return {"message_id": message_id, "status": "sent"}
