"""Application tests for post-commit patient notifications."""

from datetime import UTC, datetime

import pytest
from medtrack import lifecycle
from medtrack.domain import medtrack
from medtrack.notification import dispatch
from medtrack.notification.channel import get_channel
from medtrack.notification.dispatch import RequestNotificationDispatcher, deliver
from medtrack.notification.kinds import NotificationKind
from medtrack.request.events import RequestCancelled, RequestStatusChanged
from protean.testing import drain
from protean.utils import fqn


def _emails():
    return get_channel("email").sent_emails


def _texts():
    return get_channel("sms").sent_messages


def _subjects():
    return [e["subject"] for e in _emails()]


def test_dispatcher_is_registered_for_request_events():
    handlers = medtrack.registry.event_handlers
    assert fqn(RequestNotificationDispatcher) in handlers


class TestRequestCreated:
    def test_email_and_sms_for_patient_with_phone(self, patient):
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)

        assert len(_emails()) == 1
        email = _emails()[0]
        assert email["to"] == "jane@example.com"
        assert email["subject"] == "Medication Request Received"
        assert str(request.id) in email["body"]
        assert email["html_body"] == f"<p>{email['body']}</p>"

        assert len(_texts()) == 1
        assert _texts()[0]["to"] == "+1 555 0100"

    def test_email_only_without_phone(self):
        lifecycle.register_patient("Sam Roe", "sam@example.com", patient_id="patient-002")
        lifecycle.create_request("patient-002", "pharm-001", "Ibuprofen", 1)

        assert len(_emails()) == 1
        assert _texts() == []

    def test_unknown_patient_is_skipped(self):
        request = lifecycle.create_request("patient-unregistered", "pharm-001", "Ibuprofen", 1)

        assert _emails() == []
        assert lifecycle.get_request(request.id).status == "pending"


class TestStatusChanged:
    def test_status_and_notes_are_rendered(self, patient):
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)
        lifecycle.transition_request_status(request.id, "processing", notes="Checking the back room")

        update = _emails()[-1]
        assert update["subject"] == "Medication Request Update - PROCESSING"
        assert update["body"].endswith("Notes: Checking the back room")

    def test_patient_cancellation(self, patient):
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)
        lifecycle.cancel_request(request.id, patient.id, "Patient")

        assert _subjects()[-1] == "Medication Request Cancelled"

    def test_staff_cancellation_through_status_change_sends_cancellation(self, patient):
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)
        lifecycle.transition_request_status(request.id, "cancelled", pharmacy_id="pharm-001", notes="Recalled")

        assert _subjects() == ["Medication Request Received", "Medication Request Cancelled"]
        assert lifecycle.get_request(request.id).response_date is not None

    def test_order_creation_sends_nothing_further(self, available_request, stock):
        before = len(_emails())
        lifecycle.create_order_from_request(
            available_request.id,
            available_request.patient_id,
            items=[{"medication_id": stock.id, "quantity": 2}],
            delivery_address={"street": "12 Harbour Road", "city": "Springfield", "postal_code": "12345"},
        )

        assert lifecycle.get_request(available_request.id).status == "fulfilled"
        assert len(_emails()) == before


class TestChannelFailures:
    def test_raising_email_channel_does_not_fail_the_operation(self, patient):
        get_channel("email").configure(raise_on_send=True)

        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)

        assert lifecycle.get_request(request.id).status == "pending"
        assert _emails() == []
        assert len(_texts()) == 1

    def test_failing_dispatch_is_logged_not_raised(self, patient, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("template store offline")

        monkeypatch.setattr(dispatch, "deliver", broken)

        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)

        assert lifecycle.get_request(request.id).status == "pending"
        assert _emails() == []

    def test_failed_sms_is_reported(self, patient):
        get_channel("sms").configure(should_succeed=False)
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)

        results = deliver(NotificationKind.REQUEST_CREATED, str(request.id))
        assert [r["status"] for r in results] == ["sent", "failed"]


class TestHandlerMethods:
    def test_missing_request_returns_nothing(self):
        assert deliver(NotificationKind.REQUEST_CREATED, "req-missing") == []

    def test_status_comes_from_the_event(self, patient):
        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)
        event = RequestStatusChanged(
            request_id=str(request.id),
            patient_id=str(patient.id),
            previous_status="processing",
            new_status="available",
            notes="Ready for pickup",
            changed_at=datetime.now(UTC),
        )

        RequestNotificationDispatcher().on_request_status_changed(event)

        assert _subjects()[-1] == "Medication Request Update - AVAILABLE"

    def test_cancelled_event_for_unknown_request_does_not_raise(self):
        event = RequestCancelled(
            request_id="req-missing",
            patient_id="patient-001",
            previous_status="pending",
            cancelled_at=datetime.now(UTC),
        )

        RequestNotificationDispatcher().on_request_cancelled(event)

        assert _emails() == []


@pytest.mark.slow
class TestAsyncDelivery:
    def test_engine_delivers_after_commit(self, patient, monkeypatch):
        monkeypatch.setitem(medtrack.config, "event_processing", "async")

        request = lifecycle.create_request(patient.id, "pharm-001", "Amoxicillin 500mg", 2)
        # Committed, but nothing sent until the engine picks the event up
        assert lifecycle.get_request(request.id).status == "pending"
        assert _emails() == []

        drain(medtrack, until=lambda: len(_emails()) == 1)

        assert _subjects() == ["Medication Request Received"]
