"""Request received — sent when a patient submits a request."""

from medtrack.notification.kinds import NotificationKind


class RequestCreatedTemplate:
    kind = NotificationKind.REQUEST_CREATED.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "subject": "Medication Request Received",
            "body": (
                f"Hi {context['patient_name']}, your request for \"{context['medication_name']}\" "
                f"(ID: {context['request_id']}) has been received and is pending review."
            ),
        }
