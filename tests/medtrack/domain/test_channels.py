"""Tests for the notification channel registry and fake adapters."""

import pytest
from medtrack.notification.channel import get_channel, set_channel
from medtrack.notification.channel.fakes import FakeEmailAdapter, FakeSMSAdapter
from medtrack.notification.channel.ports import DeliveryReceipt, OutgoingMessage


class TestRegistry:
    def test_fakes_are_installed_by_default(self):
        assert isinstance(get_channel("email"), FakeEmailAdapter)
        assert isinstance(get_channel("sms"), FakeSMSAdapter)
        assert get_channel("email") is get_channel("email")

    def test_unknown_channel(self):
        with pytest.raises(ValueError, match="Unknown channel type: pigeon"):
            get_channel("pigeon")

    def test_set_channel(self):
        adapter = FakeSMSAdapter()
        set_channel("sms", adapter)
        assert get_channel("sms") is adapter

    def test_adapter_must_match_channel(self):
        with pytest.raises(ValueError):
            set_channel("email", FakeSMSAdapter())


class TestFakeAdapters:
    def test_email_outbox(self):
        adapter = FakeEmailAdapter()
        receipt = adapter.deliver(OutgoingMessage(to="jane@example.com", subject="Hi", body="Hello"))

        assert receipt.sent
        assert receipt.message_id.startswith("email-")
        assert adapter.sent_emails == [
            {
                "message_id": receipt.message_id,
                "to": "jane@example.com",
                "subject": "Hi",
                "body": "Hello",
                "html_body": None,
            }
        ]

    def test_reported_failure(self):
        adapter = FakeSMSAdapter()
        adapter.configure(should_succeed=False)

        receipt = adapter.deliver(OutgoingMessage(to="+1 555 0100", body="Hello"))

        assert receipt == DeliveryReceipt(sent=False, error="SMS delivery failed")
        assert receipt.to_dict() == {"message_id": None, "status": "failed", "error": "SMS delivery failed"}
        assert adapter.sent_messages == []

    def test_raise_on_send(self):
        adapter = FakeEmailAdapter()
        adapter.configure(raise_on_send=True, failure_reason="SMTP unreachable")
        with pytest.raises(ConnectionError, match="SMTP unreachable"):
            adapter.deliver(OutgoingMessage(to="jane@example.com", subject="Hi", body="Hello"))

    def test_reset(self):
        adapter = FakeSMSAdapter()
        adapter.deliver(OutgoingMessage(to="+1 555 0100", body="Hello"))
        adapter.configure(should_succeed=False)

        adapter.reset()

        assert adapter.sent_messages == []
        assert adapter.should_succeed
