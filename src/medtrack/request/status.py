"""Pharmacy-side status changes on a request — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Forbidden
from medtrack.request.request import MedicationRequest, RequestStatus
from medtrack.shared.repository import load


def parse_status(value: str) -> RequestStatus:
    try:
        return RequestStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in RequestStatus)
        raise ValidationError({"status": [f"Unknown request status '{value}'. Expected one of: {allowed}"]}) from None


@medtrack.command(part_of="MedicationRequest")
class TransitionRequestStatus:
    request_id = Identifier(required=True)
    new_status = String(required=True, max_length=20)
    pharmacy_id = Identifier()  # Scope of the acting staff member, when known
    notes = Text()
    response_date = DateTime()
    estimated_availability = DateTime()


@medtrack.command_handler(part_of=MedicationRequest)
class TransitionRequestStatusHandler:
    @handle(TransitionRequestStatus)
    def transition_request_status(self, command):
        target = parse_status(command.new_status)
        request = load(MedicationRequest, command.request_id)

        if command.pharmacy_id and str(request.pharmacy_id) != str(command.pharmacy_id):
            raise Forbidden("You can only manage requests for your own pharmacy")

        previous = request.status
        request.transition_to(
            target,
            notes=command.notes,
            response_date=command.response_date,
            estimated_availability=command.estimated_availability,
            changed_by=command.pharmacy_id,
        )
        current_domain.repository_for(MedicationRequest).add(request)
        logger.info(
            "Medication request status changed",
            request_id=str(request.id),
            previous_status=previous,
            new_status=target.value,
        )
        return str(request.id)
