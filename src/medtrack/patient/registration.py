"""Patient registration — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from medtrack.domain import logger, medtrack
from medtrack.errors import Conflict
from medtrack.patient.patient import Patient


@medtrack.command(part_of="Patient")
class RegisterPatient:
    """Record a patient's contact details under the identity service's user id."""

    patient_id = Identifier()
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=20)


@medtrack.command_handler(part_of=Patient)
class RegisterPatientHandler:
    @handle(RegisterPatient)
    def register_patient(self, command):
        repo = current_domain.repository_for(Patient)
        email = command.email.strip().lower()
        if repo._dao.query.filter(email_address=email).all().items:
            raise Conflict("email", email, "Email already registered")

        patient = Patient.register(
            name=command.name,
            email=email,
            phone=command.phone,
            patient_id=command.patient_id,
        )
        repo.add(patient)
        logger.info("Patient registered", patient_id=str(patient.id))
        return str(patient.id)
