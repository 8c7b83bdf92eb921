"""Read operations over medication requests."""

from datetime import datetime

from medtrack.request.request import MedicationRequest, UrgencyLevel
from medtrack.shared.pagination import Page, PageRequest, paginate
from medtrack.shared.repository import load

SORTABLE_FIELDS = frozenset(
    {"created_at", "updated_at", "request_date", "response_date", "medication_name", "quantity", "status", "urgency_level"}
)


def get_request(request_id) -> MedicationRequest:
    return load(MedicationRequest, request_id)


def get_requests(
    page_request: PageRequest | None = None,
    status: str | None = None,
    urgency_level: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> Page:
    """All requests, optionally narrowed by status, urgency and request date range."""
    filters = {
        "status": status,
        "urgency_level": urgency_level,
        "request_date__gte": date_from,
        "request_date__lte": date_to,
    }
    return _page(filters, page_request)


def get_requests_by_user(patient_id, page_request: PageRequest | None = None, status: str | None = None) -> Page:
    return _page({"patient_id": str(patient_id), "status": status}, page_request)


def get_requests_by_pharmacy(pharmacy_id, page_request: PageRequest | None = None, status: str | None = None) -> Page:
    return _page({"pharmacy_id": str(pharmacy_id), "status": status}, page_request)


def get_urgent_requests(page_request: PageRequest | None = None) -> Page:
    return _page({"urgency_level": UrgencyLevel.URGENT.value}, page_request)


def _page(filters: dict, page_request: PageRequest | None) -> Page:
    filters = {key: value for key, value in filters.items() if value is not None}
    return paginate(MedicationRequest, filters, page_request or PageRequest(), SORTABLE_FIELDS)
