"""Application tests for the patient directory and pharmacy stock."""

import pytest
from medtrack import lifecycle
from medtrack.domain import medtrack
from medtrack.errors import Conflict, NotFound
from medtrack.shared.pagination import PageRequest


class TestRegisterPatient:
    def test_register(self, patient):
        assert patient.id == "patient-001"
        assert patient.email.address == "jane@example.com"
        assert patient.can_receive_sms

    def test_duplicate_email_conflicts(self, patient):
        with pytest.raises(Conflict) as exc:
            lifecycle.register_patient("Janet", "JANE@example.com")
        assert exc.value.field == "email"


class TestAddInventoryItem:
    def test_add(self, stock):
        assert stock.quantity == 10
        assert stock.unit_price == 5.99
        assert stock.category == "otc"

    def test_same_name_in_same_pharmacy_conflicts(self, stock):
        with pytest.raises(Conflict) as exc:
            lifecycle.add_inventory_item("pharm-001", "amoxicillin 500MG", 4.50, quantity=1)
        assert "already exists" in str(exc.value)

    def test_same_name_in_other_pharmacy_is_allowed(self, stock):
        other = lifecycle.add_inventory_item("pharm-002", "Amoxicillin 500mg", 6.25, quantity=3)
        assert other.pharmacy_id == "pharm-002"


class TestLowStockThreshold:
    def test_threshold_defaults_to_configured_value(self, stock):
        assert stock.low_stock_threshold == 10
        assert stock.is_low_stock

    def test_configured_threshold_is_used(self, monkeypatch):
        monkeypatch.setitem(medtrack.config, "custom", {**medtrack.config["custom"], "LOW_STOCK_THRESHOLD": 3})

        item = lifecycle.add_inventory_item("pharm-001", "Cetirizine 10mg", 3.10, quantity=5)
        assert item.low_stock_threshold == 3
        assert not item.is_low_stock

    def test_explicit_threshold_wins(self):
        item = lifecycle.add_inventory_item("pharm-001", "Cetirizine 10mg", 3.10, quantity=5, low_stock_threshold=2)
        assert item.low_stock_threshold == 2


class TestInventoryQueries:
    @pytest.fixture()
    def shelves(self):
        return [
            lifecycle.add_inventory_item("pharm-001", "Amoxicillin 500mg", 5.99, quantity=40),
            lifecycle.add_inventory_item("pharm-001", "Insulin Pen", 25.0, quantity=2, category="prescription"),
            lifecycle.add_inventory_item("pharm-001", "Ibuprofen 200mg", 2.50, quantity=8),
            lifecycle.add_inventory_item("pharm-002", "Ibuprofen 200mg", 2.75, quantity=1),
        ]

    def test_get_inventory_item(self, shelves):
        assert lifecycle.get_inventory_item(shelves[0].id).medication_name == "Amoxicillin 500mg"

    def test_missing_item(self):
        with pytest.raises(NotFound):
            lifecycle.get_inventory_item("inv-missing")

    def test_pharmacy_filter_and_paging(self, shelves):
        page = lifecycle.get_inventory(
            PageRequest(page=1, limit=2, sort_by="medication_name", sort_order="asc"), pharmacy_id="pharm-001"
        )
        assert page.total == 3
        assert page.pages == 2
        assert [i.medication_name for i in page.items] == ["Amoxicillin 500mg", "Ibuprofen 200mg"]

    def test_category_and_search(self, shelves):
        assert lifecycle.get_inventory(category="prescription").total == 1
        assert lifecycle.get_inventory(search="ibuprofen").total == 2

    def test_low_stock_is_scarcest_first(self, shelves):
        low = lifecycle.get_low_stock()
        assert [i.quantity for i in low] == [1, 2, 8]

    def test_low_stock_for_one_pharmacy(self, shelves):
        assert [i.medication_name for i in lifecycle.get_low_stock("pharm-001")] == ["Insulin Pen", "Ibuprofen 200mg"]
