"""HTTP surface for the medtrack lifecycle engine."""

from medtrack.api.routes import (
    fakes_router,
    inventory_router,
    order_router,
    patient_router,
    request_router,
)

__all__ = ["patient_router", "inventory_router", "request_router", "order_router", "fakes_router"]
