"""BDD tests for the medication request state machine."""

from medtrack.request.request import RequestStatus
from protean.exceptions import ProteanException
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/request_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('staff move the request to "{status}"'))
def staff_move_request(medication_request, status, error):
    try:
        medication_request.transition_to(RequestStatus(status))
    except ProteanException as exc:
        error["exc"] = exc


@when(parsers.cfparse("the patient changes the quantity to {quantity:d}"))
def patient_changes_quantity(medication_request, quantity, error):
    try:
        medication_request.update_fields(quantity=quantity)
    except ProteanException as exc:
        error["exc"] = exc


@when(parsers.cfparse('the request is cancelled by "{user_id}"'))
def request_cancelled_by(medication_request, user_id, error):
    try:
        medication_request.cancel(cancelled_by=user_id)
    except ProteanException as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the medication request is now "{status}"'))
def medication_request_is(medication_request, status):
    assert medication_request.status == status


@then(parsers.cfparse("the request asks for {quantity:d} units"))
def request_asks_for(medication_request, quantity):
    assert medication_request.quantity == quantity
