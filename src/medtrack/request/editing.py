"""Patient edits to a pending request — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Forbidden
from medtrack.request.request import MedicationRequest
from medtrack.shared.repository import load


@medtrack.command(part_of="MedicationRequest")
class UpdateRequestFields:
    request_id = Identifier(required=True)
    caller_id = Identifier(required=True)
    quantity = Integer(min_value=1)
    urgency_level = String(max_length=10)
    notes = Text()
    prescription_image = String(max_length=500)


@medtrack.command_handler(part_of=MedicationRequest)
class UpdateRequestFieldsHandler:
    @handle(UpdateRequestFields)
    def update_request_fields(self, command):
        request = load(MedicationRequest, command.request_id)
        if not request.is_owned_by(command.caller_id):
            raise Forbidden("You can only update your own requests")

        changed = request.update_fields(
            quantity=command.quantity,
            urgency_level=command.urgency_level,
            notes=command.notes,
            prescription_image=command.prescription_image,
        )
        current_domain.repository_for(MedicationRequest).add(request)
        logger.info("Medication request updated", request_id=str(request.id), changed_fields=changed)
        return str(request.id)
