"""Medication Request & Order lifecycle bounded context.

Tracks a patient's medication request from submission through pharmacy
review, order creation, payment, delivery, and cancellation. Requests,
inventory, and orders live in one domain so that order creation and order
cancellation can write all three inside a single Unit of Work.
"""

import structlog
from protean.domain import Domain

medtrack = Domain(name="medtrack")

logger = structlog.get_logger(__name__)
