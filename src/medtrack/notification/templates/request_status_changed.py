"""Request update — sent whenever pharmacy staff move a request along."""

from medtrack.notification.kinds import NotificationKind


class RequestStatusChangedTemplate:
    kind = NotificationKind.REQUEST_STATUS_CHANGED.value

    @staticmethod
    def render(context: dict) -> dict:
        status = str(context["status"]).upper()
        body = (
            f"Hi {context['patient_name']}, your request for \"{context['medication_name']}\" "
            f"(ID: {context['request_id']}) has been updated to: {status}."
        )
        if context.get("notes"):
            body += f" Notes: {context['notes']}"
        return {"subject": f"Medication Request Update - {status}", "body": body}
