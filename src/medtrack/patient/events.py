"""Patient domain events."""

from protean.fields import DateTime, Identifier, String

from medtrack.domain import medtrack


@medtrack.event(part_of="Patient")
class PatientRegistered:
    __version__ = 1

    patient_id = Identifier(required=True)
    email = String(required=True)
    registered_at = DateTime(required=True)
