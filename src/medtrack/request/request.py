"""MedicationRequest aggregate — a patient's ask for a medication.

State Machine:
    PENDING → PROCESSING → AVAILABLE → FULFILLED
    PENDING/PROCESSING → UNAVAILABLE
    any non-terminal state → CANCELLED

FULFILLED and CANCELLED are terminal for callers. Only the order
coordinator may take a FULFILLED request back to AVAILABLE, when the order
it produced is cancelled.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from medtrack.domain import medtrack
from medtrack.errors import InvalidState, InvalidTransition
from medtrack.request.events import (
    RequestCancelled,
    RequestCreated,
    RequestFulfilled,
    RequestReopened,
    RequestStatusChanged,
    RequestUpdated,
)


class RequestStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class UrgencyLevel(Enum):
    URGENT = "urgent"
    NORMAL = "normal"
    LOW = "low"


REQUEST_TRANSITIONS = MappingProxyType(
    {
        RequestStatus.PENDING: frozenset(
            {RequestStatus.PROCESSING, RequestStatus.UNAVAILABLE, RequestStatus.CANCELLED}
        ),
        RequestStatus.PROCESSING: frozenset(
            {RequestStatus.AVAILABLE, RequestStatus.UNAVAILABLE, RequestStatus.CANCELLED}
        ),
        RequestStatus.AVAILABLE: frozenset({RequestStatus.FULFILLED, RequestStatus.CANCELLED}),
        RequestStatus.UNAVAILABLE: frozenset({RequestStatus.CANCELLED}),
        RequestStatus.FULFILLED: frozenset(),
        RequestStatus.CANCELLED: frozenset(),
    }
)

TERMINAL_STATUSES = frozenset({RequestStatus.FULFILLED, RequestStatus.CANCELLED})

# Fields the owning patient may edit while the request is pending
EDITABLE_FIELDS = ("quantity", "urgency_level", "notes", "prescription_image")


@medtrack.aggregate
class MedicationRequest:
    patient_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    urgency_level = String(choices=UrgencyLevel, default=UrgencyLevel.NORMAL.value)
    status = String(choices=RequestStatus, default=RequestStatus.PENDING.value)
    prescription_required = Boolean(default=False)
    prescription_image = String(max_length=500)
    notes = Text()
    request_date = DateTime()
    response_date = DateTime()
    estimated_availability = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def submit(
        cls,
        patient_id,
        pharmacy_id,
        medication_name: str,
        quantity: int,
        urgency_level: str = UrgencyLevel.NORMAL.value,
        prescription_required: bool = False,
        prescription_image: str | None = None,
        notes: str | None = None,
        estimated_availability: datetime | None = None,
    ):
        now = datetime.now(UTC)
        request = cls(
            patient_id=patient_id,
            pharmacy_id=pharmacy_id,
            medication_name=medication_name.strip(),
            quantity=quantity,
            urgency_level=urgency_level,
            status=RequestStatus.PENDING.value,
            prescription_required=prescription_required,
            prescription_image=prescription_image,
            notes=notes,
            request_date=now,
            estimated_availability=estimated_availability,
            created_at=now,
            updated_at=now,
        )
        request.raise_(
            RequestCreated(
                request_id=str(request.id),
                patient_id=str(patient_id),
                pharmacy_id=str(pharmacy_id),
                medication_name=request.medication_name,
                quantity=quantity,
                urgency_level=request.urgency_level,
                created_at=now,
            )
        )
        return request

    # -------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> RequestStatus:
        return RequestStatus(self.status)

    @property
    def allowed_transitions(self) -> frozenset:
        return REQUEST_TRANSITIONS[self.current_status]

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATUSES

    def is_owned_by(self, user_id) -> bool:
        return str(self.patient_id) == str(user_id)

    def _assert_can_transition(self, target: RequestStatus) -> None:
        if target not in self.allowed_transitions:
            raise InvalidTransition(
                "MedicationRequest",
                self.status,
                target.value,
                [s.value for s in self.allowed_transitions],
            )

    def _change_status(self, target: RequestStatus, notes: str | None = None) -> None:
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            RequestStatusChanged(
                request_id=str(self.id),
                patient_id=str(self.patient_id),
                previous_status=previous,
                new_status=target.value,
                notes=notes,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Patient edits
    # -------------------------------------------------------------------
    def update_fields(self, **changes) -> list[str]:
        """Apply patient edits. Only allowed while the request is pending.

        Returns the names of the fields that were changed.
        """
        if self.current_status != RequestStatus.PENDING:
            raise InvalidState(
                "MedicationRequest",
                self.status,
                "update",
                message="Cannot update request after it has been processed",
            )

        changed = []
        for name in EDITABLE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(self, name, changes[name])
                changed.append(name)

        if changed:
            now = datetime.now(UTC)
            self.updated_at = now
            self.raise_(
                RequestUpdated(
                    request_id=str(self.id),
                    changed_fields=json.dumps(changed),
                    updated_at=now,
                )
            )
        return changed

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def transition_to(
        self,
        new_status: RequestStatus,
        notes: str | None = None,
        response_date: datetime | None = None,
        estimated_availability: datetime | None = None,
        changed_by=None,
    ) -> None:
        """Move the request along the transition table on behalf of pharmacy staff.

        Cancelling this way closes the request exactly like ``cancel``.
        """
        self._assert_can_transition(new_status)

        if notes is not None:
            self.notes = notes
        if estimated_availability is not None:
            self.estimated_availability = estimated_availability

        if new_status == RequestStatus.CANCELLED:
            self._close(changed_by, notes, response_date)
            return

        if response_date is not None:
            self.response_date = response_date
        self._change_status(new_status, notes)

    def cancel(self, cancelled_by) -> None:
        if self.is_terminal:
            raise InvalidState(
                "MedicationRequest",
                self.status,
                "cancel",
                message=f"Cannot cancel a request that is already {self.status}",
            )
        self._close(cancelled_by)

    def _close(self, cancelled_by, notes: str | None = None, response_date: datetime | None = None) -> None:
        previous = self.status
        now = datetime.now(UTC)
        self.status = RequestStatus.CANCELLED.value
        self.response_date = response_date or now
        self.updated_at = now
        self.raise_(
            RequestCancelled(
                request_id=str(self.id),
                patient_id=str(self.patient_id),
                previous_status=previous,
                cancelled_by=str(cancelled_by) if cancelled_by is not None else None,
                notes=notes,
                cancelled_at=now,
            )
        )

    def assert_orderable(self) -> None:
        if self.current_status != RequestStatus.AVAILABLE:
            raise InvalidState(
                "MedicationRequest",
                self.status,
                "create an order from",
                message=f"Request must be in 'available' status to create an order. Current: '{self.status}'",
            )

    def fulfill(self, order_id) -> None:
        """Mark the request fulfilled once an order has been created from it."""
        self.assert_orderable()

        now = datetime.now(UTC)
        self.status = RequestStatus.FULFILLED.value
        self.response_date = now
        self.updated_at = now
        self.raise_(
            RequestFulfilled(
                request_id=str(self.id),
                order_id=str(order_id),
                fulfilled_at=now,
            )
        )

    def reopen(self, order_id) -> None:
        """Return a fulfilled request to available after its order was cancelled."""
        if self.current_status != RequestStatus.FULFILLED:
            raise InvalidState("MedicationRequest", self.status, "reopen")

        now = datetime.now(UTC)
        self.status = RequestStatus.AVAILABLE.value
        self.updated_at = now
        self.raise_(
            RequestReopened(
                request_id=str(self.id),
                order_id=str(order_id),
                reopened_at=now,
            )
        )
