"""Shared BDD fixtures and step definitions for the request and order lifecycle."""

import pytest
from medtrack import lifecycle
from medtrack.inventory.item import InventoryItem
from medtrack.request.request import MedicationRequest
from medtrack.shared.repository import load
from protean.exceptions import ProteanException
from pytest_bdd import given, parsers, then

PHARMACY_ID = "pharm-001"
DELIVERY_ADDRESS = {
    "street": "12 Harbour Road",
    "city": "Springfield",
    "postal_code": "12345",
    "phone": "+1 555 0100",
}


@pytest.fixture()
def delivery_address():
    return dict(DELIVERY_ADDRESS)


@pytest.fixture()
def error():
    """Container for the exception raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps: aggregates in memory
# ---------------------------------------------------------------------------
@given("a pending medication request", target_fixture="medication_request")
def pending_request():
    request = MedicationRequest.submit(
        patient_id="patient-001",
        pharmacy_id=PHARMACY_ID,
        medication_name="Amoxicillin 500mg",
        quantity=2,
    )
    request._events.clear()
    return request


@given(parsers.cfparse('the request has moved to "{status}"'))
def request_moved_to(medication_request, status):
    medication_request.status = status
    medication_request._events.clear()


# ---------------------------------------------------------------------------
# Given steps: committed through the lifecycle
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the pharmacy stocks {quantity:d} units of amoxicillin at {price:f}"), target_fixture="stock")
def pharmacy_stock(quantity, price):
    return lifecycle.add_inventory_item(PHARMACY_ID, "Amoxicillin 500mg", price, quantity=quantity)


@given("a registered patient with an available request", target_fixture="available_request")
def registered_patient_with_available_request():
    patient = lifecycle.register_patient("Jane Doe", "jane@example.com", patient_id="patient-001")
    request = lifecycle.create_request(patient.id, PHARMACY_ID, "Amoxicillin 500mg", 2)
    lifecycle.transition_request_status(request.id, "processing")
    return lifecycle.transition_request_status(request.id, "available")


@given(parsers.cfparse("the patient has ordered {quantity:d} units"), target_fixture="order")
def patient_ordered(available_request, stock, delivery_address, quantity):
    return lifecycle.create_order_from_request(
        available_request.id,
        available_request.patient_id,
        items=[{"medication_id": stock.id, "quantity": quantity}],
        delivery_address=delivery_address,
        delivery_fee=3.0,
        payment_method="card",
    )


@given("the order has been paid", target_fixture="order")
def order_paid(order):
    return lifecycle.process_payment(order.id, "card")


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the action fails with "{error_name}"'))
def action_fails_with(error, error_name):
    assert error["exc"] is not None, "Expected an error but none was raised"
    assert isinstance(error["exc"], ProteanException)
    assert type(error["exc"]).__name__ == error_name


@then(parsers.cfparse("the pharmacy has {quantity:d} units in stock"))
def pharmacy_has_stock(stock, quantity):
    assert load(InventoryItem, stock.id).quantity == quantity


@then(parsers.cfparse('the request is "{status}"'))
def request_is(available_request, status):
    assert lifecycle.get_request(available_request.id).status == status


@then(parsers.cfparse('the order is "{status}" with payment "{payment_status}"'))
def order_is(order, status, payment_status):
    current = lifecycle.get_order(order.id)
    assert current.status == status
    assert current.payment_status == payment_status
