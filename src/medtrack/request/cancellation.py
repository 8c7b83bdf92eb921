"""Request cancellation by its patient or by staff — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Forbidden
from medtrack.request.request import MedicationRequest
from medtrack.shared.repository import load
from medtrack.shared.roles import is_staff


@medtrack.command(part_of="MedicationRequest")
class CancelRequest:
    request_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, max_length=50)


@medtrack.command_handler(part_of=MedicationRequest)
class CancelRequestHandler:
    @handle(CancelRequest)
    def cancel_request(self, command):
        request = load(MedicationRequest, command.request_id)
        if not request.is_owned_by(command.caller_id) and not is_staff(command.caller_role):
            raise Forbidden("You can only cancel your own requests")

        request.cancel(cancelled_by=command.caller_id)
        current_domain.repository_for(MedicationRequest).add(request)
        logger.info(
            "Medication request cancelled",
            request_id=str(request.id),
            cancelled_by=str(command.caller_id),
            caller_role=command.caller_role,
        )
        return str(request.id)
