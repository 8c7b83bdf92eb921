"""In-memory channel adapters for development and tests.

Each fake keeps an outbox of delivered messages and can be told to report
failures or to raise, which is how tests exercise the dispatcher's error
handling.
"""

from uuid import uuid4

from medtrack.notification.channel.ports import DeliveryReceipt, EmailPort, OutgoingMessage, SMSPort


class _FakeChannel:
    default_failure_reason = "Delivery failed"

    def __init__(self):
        self.outbox: list[dict] = []
        self.reset()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str | None = None,
        raise_on_send: bool = False,
    ):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason or self.default_failure_reason
        self.raise_on_send = raise_on_send

    def reset(self):
        self.outbox.clear()
        self.configure()

    def deliver(self, message: OutgoingMessage) -> DeliveryReceipt:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return DeliveryReceipt(sent=False, error=self.failure_reason)

        message_id = f"{self.channel.value}-{uuid4().hex[:12]}"
        self.outbox.append({"message_id": message_id, **self._record(message)})
        return DeliveryReceipt(sent=True, message_id=message_id)

    def _record(self, message: OutgoingMessage) -> dict:
        return {"to": message.to, "body": message.body}


class FakeEmailAdapter(_FakeChannel, EmailPort):
    default_failure_reason = "Email delivery failed"

    @property
    def sent_emails(self) -> list[dict]:
        return self.outbox

    def _record(self, message: OutgoingMessage) -> dict:
        return {
            "to": message.to,
            "subject": message.subject,
            "body": message.body,
            "html_body": message.html_body,
        }


class FakeSMSAdapter(_FakeChannel, SMSPort):
    default_failure_reason = "SMS delivery failed"

    @property
    def sent_messages(self) -> list[dict]:
        return self.outbox
