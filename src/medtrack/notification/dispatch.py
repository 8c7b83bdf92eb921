"""Patient notifications for request lifecycle events.

Reacts to RequestCreated, RequestStatusChanged and RequestCancelled once
the Unit of Work that raised them has committed. With async event
processing the protean Engine (``src/server.py``) delivers the events, so
the caller never waits on a channel adapter.

Notifications are best effort. A missing request or patient skips dispatch,
and every failure is logged here and never reaches the operation that
raised the event.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from medtrack.domain import medtrack
from medtrack.notification.channel import get_channel
from medtrack.notification.channel.ports import DeliveryReceipt, OutgoingMessage
from medtrack.notification.kinds import NotificationChannel, NotificationKind
from medtrack.notification.templates import get_template
from medtrack.patient.patient import Patient
from medtrack.request.events import RequestCancelled, RequestCreated, RequestStatusChanged
from medtrack.request.request import MedicationRequest

logger = structlog.get_logger(__name__)


@medtrack.event_handler(part_of=MedicationRequest)
class RequestNotificationDispatcher:
    """Emails and texts the patient when their request changes."""

    @handle(RequestCreated)
    def on_request_created(self, event: RequestCreated) -> None:
        self._notify(NotificationKind.REQUEST_CREATED, event.request_id)

    @handle(RequestStatusChanged)
    def on_request_status_changed(self, event: RequestStatusChanged) -> None:
        # The event pins the status, even if the request has moved on since
        self._notify(
            NotificationKind.REQUEST_STATUS_CHANGED,
            event.request_id,
            notes=event.notes,
            status=event.new_status,
        )

    @handle(RequestCancelled)
    def on_request_cancelled(self, event: RequestCancelled) -> None:
        self._notify(NotificationKind.REQUEST_CANCELLED, event.request_id, notes=event.notes)

    def _notify(self, kind: NotificationKind, request_id, notes: str | None = None, status: str | None = None) -> None:
        try:
            deliver(kind, str(request_id), notes=notes, status=status)
        except Exception as e:
            logger.error(
                "Notification dispatch failed",
                request_id=str(request_id),
                kind=kind.value,
                error=str(e),
            )


def deliver(
    kind: NotificationKind,
    request_id: str,
    notes: str | None = None,
    status: str | None = None,
) -> list[dict]:
    """Render and send one notification in the current domain context.

    An email is always sent; an SMS only when the patient has a phone number.
    Returns the channel adapters' results, one per message sent.
    """
    try:
        request = current_domain.repository_for(MedicationRequest).get(request_id)
    except ObjectNotFoundError:
        logger.info("Notification skipped, request not found", request_id=request_id, kind=kind.value)
        return []

    try:
        patient = current_domain.repository_for(Patient).get(str(request.patient_id))
    except ObjectNotFoundError:
        logger.info(
            "Notification skipped, patient not found",
            request_id=request_id,
            patient_id=str(request.patient_id),
            kind=kind.value,
        )
        return []

    content = get_template(kind.value).render(
        {
            "patient_name": patient.name,
            "medication_name": request.medication_name,
            "request_id": request_id,
            "status": status or request.status,
            "notes": notes,
        }
    )

    email = OutgoingMessage(
        to=patient.email.address,
        subject=content["subject"],
        body=content["body"],
        html_body=f"<p>{content['body']}</p>",
    )
    results = [_send(NotificationChannel.EMAIL, email, kind, request_id)]
    if patient.can_receive_sms:
        sms = OutgoingMessage(to=patient.phone.number, body=content["body"])
        results.append(_send(NotificationChannel.SMS, sms, kind, request_id))
    return results


def _send(channel: NotificationChannel, message: OutgoingMessage, kind: NotificationKind, request_id: str) -> dict:
    """Deliver on one channel. A failing channel does not stop the others."""
    try:
        receipt = get_channel(channel).deliver(message)
    except Exception as e:
        receipt = DeliveryReceipt(sent=False, error=str(e))

    if receipt.sent:
        logger.info(
            "Notification sent",
            request_id=request_id,
            kind=kind.value,
            channel=channel.value,
            message_id=receipt.message_id,
        )
    else:
        logger.error(
            "Notification delivery failed",
            request_id=request_id,
            kind=kind.value,
            channel=channel.value,
            error=receipt.error or "Unknown dispatch error",
        )
    return receipt.to_dict()
