"""Caller-facing lifecycle operations.

Every mutating function builds a command and processes it synchronously.
Protean runs each handler inside one Unit of Work, so when ``process``
returns the change is committed. Patient notifications follow from the
events that Unit of Work raised (see ``medtrack.notification.dispatch``).

Order creation and cancellation for the same request are serialized within
this process by a per-request lock. Across processes the store's isolation
guarantees apply.
"""

import json
import threading
from contextlib import contextmanager
from datetime import datetime

from protean.utils.globals import current_domain

from medtrack.errors import PaymentFailed
from medtrack.inventory.item import InventoryItem
from medtrack.inventory import queries as inventory_queries
from medtrack.inventory.stocking import AddInventoryItem
from medtrack.order import queries as order_queries
from medtrack.order.cancellation import CancelOrder
from medtrack.order.creation import CreateOrderFromRequest
from medtrack.order.delivery import AssignDeliveryPartner
from medtrack.order.details import UpdateOrderDetails
from medtrack.order.invoice import GenerateInvoice
from medtrack.order.order import Order
from medtrack.order.payment import PaymentOutcome, ProcessPayment
from medtrack.order.status import TransitionOrderStatus
from medtrack.patient.patient import Patient
from medtrack.patient.registration import RegisterPatient
from medtrack.request import queries as request_queries
from medtrack.request.cancellation import CancelRequest
from medtrack.request.creation import CreateRequest
from medtrack.request.editing import UpdateRequestFields
from medtrack.request.request import MedicationRequest
from medtrack.request.status import TransitionRequestStatus
from medtrack.shared.roles import Role
from medtrack.shared.pagination import Page, PageRequest
from medtrack.shared.repository import load

# Re-exported read operations
get_request = request_queries.get_request
get_requests = request_queries.get_requests
get_requests_by_user = request_queries.get_requests_by_user
get_requests_by_pharmacy = request_queries.get_requests_by_pharmacy
get_urgent_requests = request_queries.get_urgent_requests
get_order = order_queries.get_order
get_delivery_tracking = order_queries.get_delivery_tracking
get_inventory_item = inventory_queries.get_inventory_item
get_inventory = inventory_queries.get_inventory
get_low_stock = inventory_queries.get_low_stock

_registry_lock = threading.Lock()
# request id -> [lock, number of callers holding or waiting on it]
_request_locks: dict[str, list] = {}
# Order numbers are allocated from the highest stored sequence
_numbering_lock = threading.Lock()


@contextmanager
def _request_lock(request_id):
    key = str(request_id)
    with _registry_lock:
        entry = _request_locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _registry_lock:
            entry[1] -= 1
            if not entry[1]:
                del _request_locks[key]


def _process(command):
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Directory and stock
# ---------------------------------------------------------------------------
def register_patient(name: str, email: str, phone: str | None = None, patient_id=None) -> Patient:
    created_id = _process(RegisterPatient(patient_id=patient_id, name=name, email=email, phone=phone))
    return load(Patient, created_id)


def add_inventory_item(pharmacy_id, medication_name: str, unit_price: float, quantity: int = 0, **details) -> InventoryItem:
    item_id = _process(
        AddInventoryItem(
            pharmacy_id=pharmacy_id,
            medication_name=medication_name,
            unit_price=unit_price,
            quantity=quantity,
            **details,
        )
    )
    return load(InventoryItem, item_id)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
def create_request(
    patient_id,
    pharmacy_id,
    medication_name: str,
    quantity: int,
    urgency_level: str = "normal",
    prescription_required: bool = False,
    prescription_image: str | None = None,
    notes: str | None = None,
    estimated_availability: datetime | None = None,
) -> MedicationRequest:
    request_id = _process(
        CreateRequest(
            patient_id=patient_id,
            pharmacy_id=pharmacy_id,
            medication_name=medication_name,
            quantity=quantity,
            urgency_level=urgency_level,
            prescription_required=prescription_required,
            prescription_image=prescription_image,
            notes=notes,
            estimated_availability=estimated_availability,
        )
    )
    return load(MedicationRequest, request_id)


def update_request_fields(request_id, caller_id, **fields) -> MedicationRequest:
    """Patient edits to quantity, urgency_level, notes or prescription_image."""
    _process(UpdateRequestFields(request_id=request_id, caller_id=caller_id, **fields))
    return load(MedicationRequest, request_id)


def transition_request_status(
    request_id,
    new_status: str,
    pharmacy_id=None,
    notes: str | None = None,
    response_date: datetime | None = None,
    estimated_availability: datetime | None = None,
) -> MedicationRequest:
    _process(
        TransitionRequestStatus(
            request_id=request_id,
            new_status=new_status,
            pharmacy_id=pharmacy_id,
            notes=notes,
            response_date=response_date,
            estimated_availability=estimated_availability,
        )
    )
    return load(MedicationRequest, request_id)


def cancel_request(request_id, caller_id, caller_role: str) -> MedicationRequest:
    _process(CancelRequest(request_id=request_id, caller_id=caller_id, caller_role=caller_role))
    return load(MedicationRequest, request_id)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def create_order_from_request(
    request_id,
    caller_id,
    items: list[dict],
    delivery_address: dict,
    delivery_fee: float = 0.0,
    payment_method: str | None = None,
    estimated_delivery: datetime | None = None,
) -> Order:
    """Promote an available request into a confirmed order.

    ``items`` is a list of ``{medication_id, quantity}``; names and unit
    prices are taken from the pharmacy's inventory.
    """
    with _request_lock(request_id), _numbering_lock:
        order_id = _process(
            CreateOrderFromRequest(
                request_id=request_id,
                caller_id=caller_id,
                items=json.dumps(items, default=str),
                delivery_address=json.dumps(delivery_address, default=str),
                delivery_fee=delivery_fee,
                payment_method=payment_method,
                estimated_delivery=estimated_delivery,
            )
        )
    return load(Order, order_id)


def update_order_details(
    order_id,
    delivery_address: dict | None = None,
    delivery_fee: float | None = None,
    estimated_delivery: datetime | None = None,
) -> Order:
    _process(
        UpdateOrderDetails(
            order_id=order_id,
            delivery_address=json.dumps(delivery_address) if delivery_address is not None else None,
            delivery_fee=delivery_fee,
            estimated_delivery=estimated_delivery,
        )
    )
    return load(Order, order_id)


def transition_order_status(
    order_id,
    new_status: str,
    location: str | None = None,
    notes: str | None = None,
    changed_by=None,
    caller_role: str = Role.PHARMACY_STAFF.value,
) -> Order:
    """Move the order along its transition table.

    Cancelling this way runs the same refund and stock reversal as
    ``cancel_order`` and needs the same ownership or staff role.
    """
    order = load(Order, order_id)
    with _request_lock(order.request_id):
        _process(
            TransitionOrderStatus(
                order_id=order_id,
                new_status=new_status,
                location=location,
                notes=notes,
                changed_by=changed_by,
                caller_role=caller_role,
            )
        )
    return load(Order, order_id)


def process_payment(order_id, payment_method: str) -> Order:
    """Charge the order total. A decline is recorded, then raised as ``PaymentFailed``."""
    outcome: PaymentOutcome = _process(ProcessPayment(order_id=order_id, payment_method=payment_method))
    if not outcome.succeeded:
        raise PaymentFailed(order_id, outcome.failure_reason)
    return load(Order, order_id)


def cancel_order(order_id, caller_id, caller_role: str, reason: str | None = None) -> Order:
    order = load(Order, order_id)
    with _request_lock(order.request_id):
        _process(CancelOrder(order_id=order_id, caller_id=caller_id, caller_role=caller_role, reason=reason))
    return load(Order, order_id)


def assign_delivery_partner(order_id, partner_id) -> Order:
    _process(AssignDeliveryPartner(order_id=order_id, delivery_partner_id=partner_id))
    return load(Order, order_id)


def generate_invoice(order_id) -> Order:
    _process(GenerateInvoice(order_id=order_id))
    return load(Order, order_id)


# ---------------------------------------------------------------------------
# Order reads
# ---------------------------------------------------------------------------
def get_orders(page_request: PageRequest | None = None, status=None, payment_status=None) -> Page:
    return order_queries.get_orders(page_request, status=status, payment_status=payment_status)


def get_orders_by_user(patient_id, page_request: PageRequest | None = None, status=None, payment_status=None) -> Page:
    return order_queries.get_orders_by_user(patient_id, page_request, status=status, payment_status=payment_status)


def get_orders_by_pharmacy(pharmacy_id, page_request: PageRequest | None = None, status=None, payment_status=None) -> Page:
    return order_queries.get_orders_by_pharmacy(pharmacy_id, page_request, status=status, payment_status=payment_status)


def get_orders_by_delivery_partner(
    partner_id, page_request: PageRequest | None = None, status=None, payment_status=None
) -> Page:
    return order_queries.get_orders_by_delivery_partner(
        partner_id, page_request, status=status, payment_status=payment_status
    )
