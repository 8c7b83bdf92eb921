"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules
(patient email and phone formats, delivery coordinate ranges) and match the
field names expected by the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

MEDICATIONS = [
    ("Amoxicillin 500mg", "amoxicillin", "capsule", True),
    ("Ibuprofen 200mg", "ibuprofen", "tablet", False),
    ("Cetirizine 10mg", "cetirizine", "tablet", False),
    ("Metformin 850mg", "metformin", "tablet", True),
    ("Salbutamol Syrup", "salbutamol", "syrup", True),
]


# ---------- Callers ----------


def unique_id(prefix: str) -> str:
    """Generate unique ids like 'patient-lt-a1b2c3d4'."""
    return f"{prefix}-lt-{uuid.uuid4().hex[:8]}"


def patient_headers(patient_id: str) -> dict:
    return {"X-User-Id": patient_id, "X-User-Role": "Patient"}


def staff_headers(staff_id: str, pharmacy_id: str) -> dict:
    return {"X-User-Id": staff_id, "X-User-Role": "Pharmacy Staff", "X-Pharmacy-Id": pharmacy_id}


def partner_headers(partner_id: str) -> dict:
    return {"X-User-Id": partner_id, "X-User-Role": "Delivery Partner"}


# ---------- Directory and stock ----------


def valid_email() -> str:
    """Generate emails with one @ and a dotted domain."""
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}"


def valid_phone() -> str:
    """Generate phones of digits, spaces and a leading +."""
    return f"+1 {random.randint(200, 999)} {random.randint(200, 999)} {random.randint(1000, 9999)}"


def patient_data(with_phone: bool = True) -> dict:
    """Generate RegisterPatientRequest payload."""
    return {
        "name": fake.name()[:100],
        "email": valid_email(),
        "phone": valid_phone() if with_phone else None,
    }


def inventory_item_data(pharmacy_id: str, quantity: int = 50) -> dict:
    """Generate AddInventoryItemRequest payload with a name unique to this run."""
    name, generic, form, prescription = random.choice(MEDICATIONS)
    return {
        "pharmacy_id": pharmacy_id,
        "medication_name": f"{name} {uuid.uuid4().hex[:6]}",
        "generic_name": generic,
        "category": "prescription" if prescription else "otc",
        "form": form,
        "quantity": quantity,
        "unit_price": round(random.uniform(1.99, 49.99), 2),
        "requires_prescription": prescription,
    }


# ---------- Requests and orders ----------


def request_data(pharmacy_id: str, medication_name: str) -> dict:
    """Generate CreateRequestRequest payload."""
    return {
        "pharmacy_id": pharmacy_id,
        "medication_name": medication_name,
        "quantity": random.randint(1, 3),
        "urgency_level": random.choice(["urgent", "normal", "normal", "low"]),
        "notes": fake.sentence()[:200],
    }


def delivery_address() -> dict:
    """Generate DeliveryAddressSchema payload, with coordinates most of the time."""
    address = {
        "street": fake.street_address()[:200],
        "city": fake.city()[:100],
        "postal_code": fake.zipcode()[:20],
        "phone": valid_phone(),
    }
    if random.random() < 0.8:
        address["coordinates"] = {
            "latitude": round(random.uniform(25.0, 48.0), 4),
            "longitude": round(random.uniform(-125.0, -70.0), 4),
        }
    return address


def order_data(request_id: str, item_id: str, quantity: int) -> dict:
    """Generate CreateOrderRequest payload for one stocked item."""
    return {
        "request_id": request_id,
        "items": [{"medication_id": item_id, "quantity": quantity}],
        "delivery_address": delivery_address(),
        "delivery_fee": random.choice([0.0, 2.5, 4.99]),
        "payment_method": random.choice(["card", "online"]),
    }
