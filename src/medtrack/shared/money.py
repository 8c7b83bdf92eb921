"""Monetary rounding and order pricing arithmetic.

Amounts are floats at rest (matching the aggregate fields) but every
rounding step goes through ``Decimal`` with half-up rounding, so that
``11.98 * 0.05`` becomes ``0.60`` rather than drifting with binary floats.
"""

from decimal import ROUND_HALF_UP, Decimal

from medtrack.shared.settings import tax_rate

_CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round to two decimal places, half away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def line_total(quantity: int, unit_price: float) -> float:
    return round_money(quantity * unit_price)


def compute_tax(subtotal: float, rate: float | None = None) -> float:
    rate = tax_rate() if rate is None else rate
    return round_money(subtotal * rate)


def compute_total(subtotal: float, delivery_fee: float, tax: float) -> float:
    return round_money(subtotal + delivery_fee + tax)


def price_lines(lines: list[dict], delivery_fee: float = 0.0) -> dict:
    """Price a list of ``{quantity, unit_price}`` dicts.

    Returns the subtotal, tax, delivery fee, and total for the lines.
    """
    subtotal = round_money(sum(line_total(line["quantity"], line["unit_price"]) for line in lines))
    tax = compute_tax(subtotal)
    return {
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "tax": tax,
        "total": compute_total(subtotal, delivery_fee, tax),
    }
