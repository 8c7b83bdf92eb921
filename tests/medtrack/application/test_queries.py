"""Application tests for paginated request and order listings."""

from datetime import UTC, datetime, timedelta

import pytest
from medtrack import lifecycle
from medtrack.shared.pagination import PageRequest
from protean.exceptions import ValidationError


def _seed_requests():
    lifecycle.create_request("patient-001", "pharm-001", "Amoxicillin", 1, urgency_level="urgent")
    lifecycle.create_request("patient-001", "pharm-002", "Ibuprofen", 2)
    lifecycle.create_request("patient-002", "pharm-001", "Cetirizine", 3, urgency_level="low")


class TestPageRequest:
    def test_defaults(self):
        page_request = PageRequest()
        assert (page_request.page, page_request.limit, page_request.sort_by, page_request.sort_order) == (
            1,
            10,
            "created_at",
            "desc",
        )

    @pytest.mark.parametrize("kwargs", [{"page": 0}, {"limit": 0}, {"sort_order": "up"}])
    def test_invalid_input(self, kwargs):
        with pytest.raises(ValidationError):
            PageRequest(**kwargs)


class TestRequestListings:
    def test_pages(self):
        _seed_requests()
        first = lifecycle.get_requests(PageRequest(page=1, limit=2))
        second = lifecycle.get_requests(PageRequest(page=2, limit=2))

        assert first.total == 3
        assert first.pages == 2
        assert len(first.items) == 2
        assert len(second.items) == 1

    def test_sort_ascending_by_name(self):
        _seed_requests()
        page = lifecycle.get_requests(PageRequest(sort_by="medication_name", sort_order="asc"))
        assert [r.medication_name for r in page.items] == ["Amoxicillin", "Cetirizine", "Ibuprofen"]

    def test_unknown_sort_field(self):
        with pytest.raises(ValidationError) as exc:
            lifecycle.get_requests(PageRequest(sort_by="patient_id"))
        assert "Cannot sort by 'patient_id'" in str(exc.value)

    def test_filter_by_status_and_urgency(self):
        _seed_requests()
        assert lifecycle.get_requests(urgency_level="low").total == 1
        assert lifecycle.get_requests(status="pending").total == 3
        assert lifecycle.get_requests(status="cancelled").total == 0

    def test_filter_by_date_range(self):
        _seed_requests()
        tomorrow = datetime.now(UTC) + timedelta(days=1)
        yesterday = datetime.now(UTC) - timedelta(days=1)
        assert lifecycle.get_requests(date_from=tomorrow).total == 0
        assert lifecycle.get_requests(date_from=yesterday, date_to=tomorrow).total == 3

    def test_by_user(self):
        _seed_requests()
        page = lifecycle.get_requests_by_user("patient-001")
        assert page.total == 2
        assert {str(r.patient_id) for r in page.items} == {"patient-001"}

    def test_by_pharmacy_with_status(self):
        _seed_requests()
        assert lifecycle.get_requests_by_pharmacy("pharm-001").total == 2
        assert lifecycle.get_requests_by_pharmacy("pharm-001", status="processing").total == 0

    def test_urgent(self):
        _seed_requests()
        page = lifecycle.get_urgent_requests()
        assert [r.medication_name for r in page.items] == ["Amoxicillin"]

    def test_page_dict(self):
        _seed_requests()
        payload = lifecycle.get_requests(PageRequest(limit=2)).to_dict()
        assert set(payload) == {"items", "total", "page", "limit", "pages"}
        assert payload["pages"] == 2


class TestOrderListings:
    def test_by_user_and_pharmacy(self, order):
        assert lifecycle.get_orders_by_user("patient-001").total == 1
        assert lifecycle.get_orders_by_user("patient-999").total == 0
        assert lifecycle.get_orders_by_pharmacy("pharm-001").total == 1

    def test_filter_by_payment_status(self, paid_order):
        assert lifecycle.get_orders(payment_status="paid").total == 1
        assert lifecycle.get_orders(payment_status="pending").total == 0

    def test_by_delivery_partner(self, order):
        assert lifecycle.get_orders_by_delivery_partner("driver-007").total == 0
        lifecycle.assign_delivery_partner(order.id, "driver-007")
        page = lifecycle.get_orders_by_delivery_partner("driver-007", status="confirmed")
        assert [o.order_number for o in page.items] == [order.order_number]
