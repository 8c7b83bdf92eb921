"""Request cancelled — sent when a patient or staff cancel a request."""

from medtrack.notification.kinds import NotificationKind


class RequestCancelledTemplate:
    kind = NotificationKind.REQUEST_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Medication Request Cancelled",
            "body": (
                f"Hi {context['patient_name']}, your request for \"{context['medication_name']}\" "
                f"(ID: {context['request_id']}) has been cancelled."
            ),
        }
