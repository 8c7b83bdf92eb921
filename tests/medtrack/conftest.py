import pytest

PHARMACY_ID = "pharm-001"
ADDRESS = {
    "street": "12 Harbour Road",
    "city": "Springfield",
    "postal_code": "12345",
    "phone": "+1 555 0100",
}


@pytest.fixture(scope="session")
def _medtrack_domain():
    """Initialize the medtrack domain once per session."""
    from medtrack.domain import medtrack

    medtrack.init()
    return medtrack


@pytest.fixture(scope="session", autouse=True)
def setup_db(_medtrack_domain):
    from medtrack.utils.db import drop_db, setup_db

    setup_db(_medtrack_domain)

    yield

    drop_db(_medtrack_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_medtrack_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _medtrack_domain.domain_context()
    ctx.push()

    yield

    from medtrack.gateway import reset_gateway
    from medtrack.notification.channel import reset_channels
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_channels()
    ctx.pop()


# ---------------------------------------------------------------------------
# Shared lifecycle fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def patient():
    from medtrack import lifecycle

    return lifecycle.register_patient("Jane Doe", "jane@example.com", "+1 555 0100", patient_id="patient-001")


@pytest.fixture()
def stock():
    """Ten units of amoxicillin at 5.99 each."""
    from medtrack import lifecycle

    return lifecycle.add_inventory_item(PHARMACY_ID, "Amoxicillin 500mg", 5.99, quantity=10)


@pytest.fixture()
def available_request(patient):
    from medtrack import lifecycle

    request = lifecycle.create_request(patient.id, PHARMACY_ID, "Amoxicillin 500mg", 2, urgency_level="urgent")
    lifecycle.transition_request_status(request.id, "processing")
    return lifecycle.transition_request_status(request.id, "available", notes="In stock")


@pytest.fixture()
def order(available_request, stock):
    """A confirmed order for two units: 11.98 subtotal, 3.00 delivery, 0.60 tax."""
    from medtrack import lifecycle

    return lifecycle.create_order_from_request(
        available_request.id,
        available_request.patient_id,
        items=[{"medication_id": stock.id, "quantity": 2}],
        delivery_address=ADDRESS,
        delivery_fee=3.0,
        payment_method="card",
    )


@pytest.fixture()
def paid_order(order):
    from medtrack import lifecycle

    return lifecycle.process_payment(order.id, "card")
