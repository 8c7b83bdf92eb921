"""Medication request domain events."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from medtrack.domain import medtrack


@medtrack.event(part_of="MedicationRequest")
class RequestCreated:
    __version__ = 1

    request_id = Identifier(required=True)
    patient_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True)
    quantity = Integer(required=True)
    urgency_level = String(required=True)
    created_at = DateTime(required=True)


@medtrack.event(part_of="MedicationRequest")
class RequestUpdated:
    """The owning patient edited a pending request."""

    __version__ = 1

    request_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON list of field names
    updated_at = DateTime(required=True)


@medtrack.event(part_of="MedicationRequest")
class RequestStatusChanged:
    __version__ = 1

    request_id = Identifier(required=True)
    patient_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    notes = Text()
    changed_at = DateTime(required=True)


@medtrack.event(part_of="MedicationRequest")
class RequestCancelled:
    __version__ = 1

    request_id = Identifier(required=True)
    patient_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = Identifier()  # Caller or pharmacy, when known
    notes = Text()
    cancelled_at = DateTime(required=True)


@medtrack.event(part_of="MedicationRequest")
class RequestFulfilled:
    """An order was created from the request."""

    __version__ = 1

    request_id = Identifier(required=True)
    order_id = Identifier(required=True)
    fulfilled_at = DateTime(required=True)


@medtrack.event(part_of="MedicationRequest")
class RequestReopened:
    """A fulfilled request went back to available because its order was cancelled."""

    __version__ = 1

    request_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reopened_at = DateTime(required=True)
