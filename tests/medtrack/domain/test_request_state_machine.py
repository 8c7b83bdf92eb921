"""Tests for MedicationRequest state machine — every status pair."""

import pytest
from medtrack.errors import InvalidState, InvalidTransition
from medtrack.request.events import RequestCancelled, RequestFulfilled, RequestReopened, RequestStatusChanged
from medtrack.request.request import (
    REQUEST_TRANSITIONS,
    MedicationRequest,
    RequestStatus,
)


def _make_request(status=RequestStatus.PENDING):
    request = MedicationRequest.submit(
        patient_id="patient-001",
        pharmacy_id="pharm-001",
        medication_name="  Amoxicillin 500mg ",
        quantity=2,
    )
    request.status = status.value
    request._events.clear()
    return request


_ALL_PAIRS = [(current, target) for current in RequestStatus for target in RequestStatus]


class TestTransitionTable:
    @pytest.mark.parametrize("current,target", _ALL_PAIRS, ids=lambda s: s.value)
    def test_transition_follows_table(self, current, target):
        request = _make_request(current)

        if target in REQUEST_TRANSITIONS[current]:
            request.transition_to(target)
            assert request.status == target.value
            assert len(request._events) == 1
            expected = RequestCancelled if target == RequestStatus.CANCELLED else RequestStatusChanged
            assert isinstance(request._events[0], expected)
        else:
            with pytest.raises(InvalidTransition) as exc:
                request.transition_to(target)
            assert exc.value.current == current.value
            assert exc.value.requested == target.value
            assert request.status == current.value
            assert request._events == []

    def test_rejected_transition_lists_allowed_statuses(self):
        request = _make_request(RequestStatus.PENDING)
        with pytest.raises(InvalidTransition) as exc:
            request.transition_to(RequestStatus.FULFILLED)
        assert exc.value.allowed == ["cancelled", "processing", "unavailable"]
        assert "Invalid status transition from 'pending' to 'fulfilled'" in str(exc.value)

    def test_terminal_statuses_have_no_exits(self):
        assert REQUEST_TRANSITIONS[RequestStatus.FULFILLED] == frozenset()
        assert REQUEST_TRANSITIONS[RequestStatus.CANCELLED] == frozenset()

    def test_transition_raises_status_changed_event(self):
        request = _make_request()
        request.transition_to(RequestStatus.PROCESSING, notes="Checking stock")

        event = request._events[-1]
        assert isinstance(event, RequestStatusChanged)
        assert event.previous_status == "pending"
        assert event.new_status == "processing"
        assert event.notes == "Checking stock"

    def test_transition_records_notes_and_dates(self):
        from datetime import UTC, datetime

        when = datetime(2026, 3, 1, tzinfo=UTC)
        request = _make_request(RequestStatus.PROCESSING)
        request.transition_to(RequestStatus.AVAILABLE, notes="Ready", estimated_availability=when)
        assert request.notes == "Ready"
        assert request.estimated_availability == when

    def test_cancelling_through_transition_closes_the_request(self):
        request = _make_request(RequestStatus.PROCESSING)
        request.transition_to(RequestStatus.CANCELLED, notes="Recalled by supplier", changed_by="pharm-001")

        assert request.status == "cancelled"
        assert request.response_date is not None
        assert len(request._events) == 1
        event = request._events[0]
        assert isinstance(event, RequestCancelled)
        assert event.previous_status == "processing"
        assert event.cancelled_by == "pharm-001"
        assert event.notes == "Recalled by supplier"


class TestSubmit:
    def test_submitted_request_is_pending(self):
        request = MedicationRequest.submit("patient-001", "pharm-001", "Ibuprofen", 1)
        assert request.status == RequestStatus.PENDING.value
        assert request.urgency_level == "normal"
        assert request.request_date is not None

    def test_medication_name_is_trimmed(self):
        request = MedicationRequest.submit("patient-001", "pharm-001", "  Ibuprofen  ", 1)
        assert request.medication_name == "Ibuprofen"


class TestPatientEdits:
    def test_pending_request_can_be_edited(self):
        request = _make_request()
        changed = request.update_fields(quantity=5, notes="Need more")
        assert changed == ["quantity", "notes"]
        assert request.quantity == 5

    def test_none_values_are_ignored(self):
        request = _make_request()
        assert request.update_fields(quantity=None) == []
        assert request._events == []

    @pytest.mark.parametrize(
        "status",
        [s for s in RequestStatus if s != RequestStatus.PENDING],
        ids=lambda s: s.value,
    )
    def test_processed_request_cannot_be_edited(self, status):
        request = _make_request(status)
        with pytest.raises(InvalidState) as exc:
            request.update_fields(quantity=5)
        assert "Cannot update request after it has been processed" in str(exc.value)


class TestCancel:
    @pytest.mark.parametrize(
        "status",
        [RequestStatus.PENDING, RequestStatus.PROCESSING, RequestStatus.AVAILABLE, RequestStatus.UNAVAILABLE],
        ids=lambda s: s.value,
    )
    def test_non_terminal_request_can_be_cancelled(self, status):
        request = _make_request(status)
        request.cancel(cancelled_by="patient-001")

        assert request.status == "cancelled"
        assert request.response_date is not None
        event = request._events[-1]
        assert isinstance(event, RequestCancelled)
        assert event.previous_status == status.value

    @pytest.mark.parametrize("status", [RequestStatus.FULFILLED, RequestStatus.CANCELLED], ids=lambda s: s.value)
    def test_terminal_request_cannot_be_cancelled(self, status):
        request = _make_request(status)
        with pytest.raises(InvalidState):
            request.cancel(cancelled_by="patient-001")


class TestFulfillAndReopen:
    def test_available_request_can_be_fulfilled(self):
        request = _make_request(RequestStatus.AVAILABLE)
        request.fulfill(order_id="order-001")

        assert request.status == "fulfilled"
        assert request.response_date is not None
        assert len(request._events) == 1
        event = request._events[0]
        assert isinstance(event, RequestFulfilled)
        assert event.order_id == "order-001"

    def test_pending_request_cannot_be_fulfilled(self):
        request = _make_request()
        with pytest.raises(InvalidState) as exc:
            request.fulfill(order_id="order-001")
        assert "Request must be in 'available' status to create an order. Current: 'pending'" in str(exc.value)

    def test_fulfilled_request_reopens_to_available(self):
        request = _make_request(RequestStatus.FULFILLED)
        request.reopen(order_id="order-001")

        assert request.status == "available"
        event = request._events[-1]
        assert isinstance(event, RequestReopened)
        assert event.order_id == "order-001"

    def test_only_fulfilled_request_can_reopen(self):
        request = _make_request(RequestStatus.CANCELLED)
        with pytest.raises(InvalidState):
            request.reopen(order_id="order-001")
