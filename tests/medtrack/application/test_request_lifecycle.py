"""Application tests for request operations via the lifecycle facade."""

import pytest
from medtrack import lifecycle
from medtrack.errors import Forbidden, InvalidState, InvalidTransition, NotFound
from medtrack.request.request import MedicationRequest
from protean import current_domain
from protean.exceptions import ValidationError

PHARMACY_ID = "pharm-001"


def _create(patient_id="patient-001", **overrides):
    defaults = {"medication_name": "Amoxicillin 500mg", "quantity": 2}
    defaults.update(overrides)
    return lifecycle.create_request(patient_id, PHARMACY_ID, **defaults)


class TestCreateRequest:
    def test_create_request_is_pending(self):
        request = _create(urgency_level="urgent", prescription_required=True)
        stored = current_domain.repository_for(MedicationRequest).get(request.id)
        assert stored.status == "pending"
        assert stored.urgency_level == "urgent"
        assert stored.prescription_required is True

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _create(quantity=0)

    def test_unknown_urgency_is_rejected(self):
        with pytest.raises(ValidationError):
            _create(urgency_level="asap")


class TestUpdateRequest:
    def test_owner_edits_pending_request(self):
        request = _create()
        updated = lifecycle.update_request_fields(request.id, "patient-001", quantity=4, notes="Extra box")
        assert updated.quantity == 4
        assert updated.notes == "Extra box"

    def test_other_patient_cannot_edit(self):
        request = _create()
        with pytest.raises(Forbidden) as exc:
            lifecycle.update_request_fields(request.id, "patient-999", quantity=4)
        assert exc.value.reason == "You can only update your own requests"

    def test_processed_request_cannot_be_edited(self):
        request = _create()
        lifecycle.transition_request_status(request.id, "processing")
        with pytest.raises(InvalidState):
            lifecycle.update_request_fields(request.id, "patient-001", quantity=4)
        assert lifecycle.get_request(request.id).quantity == 2

    def test_ownership_is_checked_before_status(self):
        request = _create()
        lifecycle.transition_request_status(request.id, "processing")
        with pytest.raises(Forbidden):
            lifecycle.update_request_fields(request.id, "patient-999", quantity=4)


class TestTransitionRequest:
    def test_walk_to_available(self):
        request = _create()
        lifecycle.transition_request_status(request.id, "processing")
        request = lifecycle.transition_request_status(request.id, "available", notes="Ready for pickup")
        assert request.status == "available"
        assert request.notes == "Ready for pickup"

    def test_invalid_transition_is_rejected(self):
        request = _create()
        with pytest.raises(InvalidTransition):
            lifecycle.transition_request_status(request.id, "available")
        assert lifecycle.get_request(request.id).status == "pending"

    def test_unknown_status_is_rejected(self):
        request = _create()
        with pytest.raises(ValidationError) as exc:
            lifecycle.transition_request_status(request.id, "shipped")
        assert "Unknown request status" in str(exc.value)

    def test_staff_of_other_pharmacy_is_forbidden(self):
        request = _create()
        with pytest.raises(Forbidden):
            lifecycle.transition_request_status(request.id, "processing", pharmacy_id="pharm-999")

    def test_staff_of_same_pharmacy_may_transition(self):
        request = _create()
        request = lifecycle.transition_request_status(request.id, "processing", pharmacy_id=PHARMACY_ID)
        assert request.status == "processing"


class TestCancelRequest:
    def test_owner_cancels(self):
        request = _create()
        request = lifecycle.cancel_request(request.id, "patient-001", "Patient")
        assert request.status == "cancelled"

    def test_staff_cancels_any_request(self):
        request = _create()
        request = lifecycle.cancel_request(request.id, "staff-001", "Pharmacy Staff")
        assert request.status == "cancelled"

    def test_other_patient_cannot_cancel(self):
        request = _create()
        with pytest.raises(Forbidden):
            lifecycle.cancel_request(request.id, "patient-999", "Patient")

    def test_cancelled_request_cannot_be_cancelled_again(self):
        request = _create()
        lifecycle.cancel_request(request.id, "patient-001", "Patient")
        with pytest.raises(InvalidState):
            lifecycle.cancel_request(request.id, "patient-001", "Patient")

    def test_ownership_is_checked_before_status(self):
        request = _create()
        lifecycle.cancel_request(request.id, "patient-001", "Patient")
        with pytest.raises(Forbidden):
            lifecycle.cancel_request(request.id, "patient-999", "Patient")

    def test_staff_cancel_through_status_stamps_response_date(self):
        request = _create()
        request = lifecycle.transition_request_status(request.id, "cancelled", pharmacy_id=PHARMACY_ID)
        assert request.status == "cancelled"
        assert request.response_date is not None


class TestLookup:
    def test_missing_request(self):
        with pytest.raises(NotFound) as exc:
            lifecycle.get_request("req-missing")
        assert exc.value.context == {"entity": "MedicationRequest", "identifier": "req-missing"}
