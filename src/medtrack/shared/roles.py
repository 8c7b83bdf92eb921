"""Caller roles as asserted by the external identity service."""

from enum import Enum


class Role(Enum):
    PATIENT = "Patient"
    PHARMACY_STAFF = "Pharmacy Staff"
    SYSTEM_ADMIN = "System Admin"
    DELIVERY_PARTNER = "Delivery Partner"


# Roles that may act on records they do not own
STAFF_ROLES = frozenset({Role.PHARMACY_STAFF.value, Role.SYSTEM_ADMIN.value})


def is_staff(role: str | None) -> bool:
    return role in STAFF_ROLES
