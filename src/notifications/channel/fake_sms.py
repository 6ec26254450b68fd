"""In-memory SMS provider used in development and tests.

Messages that would have been delivered land in ``outbox``. Failures can
be forced for every send (``configure``) or for the next few sends only
(``fail_next``), which is how the queue's retry path is exercised.
"""

from uuid import uuid4

from notifications.channel.sms_port import INVALID_NUMBER_MESSAGE, SMSPort, is_deliverable_number


class FakeSMSAdapter(SMSPort):
    def __init__(self):
        self.outbox: list[dict] = []
        self.attempts: int = 0
        self.should_succeed = True
        self.failure_reason = "SMS delivery failed"
        self._forced_failures = 0

    def configure(self, should_succeed: bool = True, failure_reason: str = "SMS delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def fail_next(self, count: int = 1, failure_reason: str = "Carrier timeout"):
        self._forced_failures = count
        self.failure_reason = failure_reason

    def send(self, to: str, body: str) -> dict:
        self.attempts += 1

        if not is_deliverable_number(to):
            return {"message_id": None, "status": "failed", "error": INVALID_NUMBER_MESSAGE}

        if self._forced_failures > 0:
            self._forced_failures -= 1
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"sms-{uuid4().hex[:12]}"
        self.outbox.append({"message_id": message_id, "to": to, "body": body})
        return {"message_id": message_id, "status": "sent"}
