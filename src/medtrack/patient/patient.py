"""Patient aggregate: the contact directory the notification dispatcher reads.

Authentication and roles belong to the external identity service; the
engine only keeps what it needs to reach a patient: a display name, an
email address, and an optional phone number for SMS.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, String, ValueObject

from medtrack.domain import medtrack
from medtrack.patient.events import PatientRegistered
from medtrack.shared.email import EmailAddress
from medtrack.shared.phone import PhoneNumber


@medtrack.aggregate
class Patient:
    name = String(required=True, max_length=100)
    email = ValueObject(EmailAddress, required=True)
    phone = ValueObject(PhoneNumber)
    registered_at = DateTime()

    @classmethod
    def register(cls, name: str, email: str, phone: str | None = None, patient_id: str | None = None):
        now = datetime.now(UTC)
        kwargs = {"id": patient_id} if patient_id else {}
        patient = cls(
            name=name,
            email=EmailAddress(address=email.strip().lower()),
            phone=PhoneNumber(number=phone) if phone else None,
            registered_at=now,
            **kwargs,
        )
        patient.raise_(
            PatientRegistered(
                patient_id=str(patient.id),
                email=patient.email.address,
                registered_at=now,
            )
        )
        return patient

    @property
    def can_receive_sms(self) -> bool:
        return self.phone is not None
