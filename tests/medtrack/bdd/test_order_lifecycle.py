"""BDD tests for placing, paying for and cancelling orders."""

from medtrack import lifecycle
from medtrack.gateway import get_gateway
from protean.exceptions import ProteanException
from pytest_bdd import given, parsers, scenarios, when

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the payment gateway fails refunds")
def gateway_fails_refunds():
    get_gateway().configure(should_succeed=False, failure_reason="Refund window closed", operations=["create_refund"])


@given("the payment gateway declines charges")
def gateway_declines_charges():
    get_gateway().configure(should_succeed=False, failure_reason="Card declined", operations=["confirm_payment_intent"])


@given("the order has been delivered", target_fixture="order")
def order_delivered(order):
    for status in ("packed", "out_for_delivery", "delivered"):
        order = lifecycle.transition_order_status(order.id, status)
    return order


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the patient orders {quantity:d} units"), target_fixture="order")
def patient_orders(available_request, stock, delivery_address, quantity, error):
    try:
        return lifecycle.create_order_from_request(
            available_request.id,
            available_request.patient_id,
            items=[{"medication_id": stock.id, "quantity": quantity}],
            delivery_address=delivery_address,
            delivery_fee=3.0,
        )
    except ProteanException as exc:
        error["exc"] = exc
        return None


@when("the patient cancels the order")
def patient_cancels_order(order, error):
    try:
        lifecycle.cancel_order(order.id, order.patient_id, "Patient", reason="No longer needed")
    except ProteanException as exc:
        error["exc"] = exc


@when("the patient pays by card")
def patient_pays(order, error):
    try:
        lifecycle.process_payment(order.id, "card")
    except ProteanException as exc:
        error["exc"] = exc
