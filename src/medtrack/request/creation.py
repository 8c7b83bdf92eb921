"""Medication request submission — command and handler."""

from protean import handle
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.request.request import MedicationRequest, UrgencyLevel


@medtrack.command(part_of="MedicationRequest")
class CreateRequest:
    patient_id = Identifier(required=True)
    pharmacy_id = Identifier(required=True)
    medication_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    urgency_level = String(max_length=10, default=UrgencyLevel.NORMAL.value)
    prescription_required = Boolean(default=False)
    prescription_image = String(max_length=500)
    notes = Text()
    estimated_availability = DateTime()


@medtrack.command_handler(part_of=MedicationRequest)
class CreateRequestHandler:
    @handle(CreateRequest)
    def create_request(self, command):
        request = MedicationRequest.submit(
            patient_id=command.patient_id,
            pharmacy_id=command.pharmacy_id,
            medication_name=command.medication_name,
            quantity=command.quantity,
            urgency_level=command.urgency_level or UrgencyLevel.NORMAL.value,
            prescription_required=bool(command.prescription_required),
            prescription_image=command.prescription_image,
            notes=command.notes,
            estimated_availability=command.estimated_availability,
        )
        current_domain.repository_for(MedicationRequest).add(request)
        logger.info(
            "Medication request created",
            request_id=str(request.id),
            patient_id=str(command.patient_id),
            urgency_level=request.urgency_level,
        )
        return str(request.id)
