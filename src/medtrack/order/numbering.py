"""Order number allocation: ``ORD-<year>-<6-digit sequence>``.

The sequence restarts at 1 each calendar year. The next number is one past
the highest sequence already stored for the year, so allocation must run
inside the Unit of Work that writes the new Order.
"""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from medtrack.order.order import Order

ORDER_NUMBER_PREFIX = "ORD"
SEQUENCE_WIDTH = 6


def format_order_number(year: int, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}-{year:04d}-{sequence:0{SEQUENCE_WIDTH}d}"


def next_order_number(year: int | None = None) -> tuple[str, int, int]:
    """Return ``(order_number, year, sequence)`` for the next order of ``year``."""
    year = year or datetime.now(UTC).year
    latest = (
        current_domain.repository_for(Order)
        ._dao.query.filter(order_year=year)
        .order_by("-order_sequence")
        .limit(1)
        .all()
    )
    sequence = latest.items[0].order_sequence + 1 if latest.items else 1
    return format_order_number(year, sequence), year, sequence
