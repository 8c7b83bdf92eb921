"""Template registry — maps NotificationKind to template classes.

Each template renders a subject and a plain-text body from the request
and patient context the dispatcher assembles.
"""

from medtrack.notification.kinds import NotificationKind
from medtrack.notification.templates.request_cancelled import RequestCancelledTemplate
from medtrack.notification.templates.request_created import RequestCreatedTemplate
from medtrack.notification.templates.request_status_changed import RequestStatusChangedTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationKind.REQUEST_CREATED.value: RequestCreatedTemplate,
    NotificationKind.REQUEST_STATUS_CHANGED.value: RequestStatusChangedTemplate,
    NotificationKind.REQUEST_CANCELLED.value: RequestCancelledTemplate,
}


def get_template(kind: str):
    template_cls = TEMPLATE_REGISTRY.get(kind)
    if template_cls is None:
        raise ValueError(f"No template registered for notification kind: {kind}")
    return template_cls
