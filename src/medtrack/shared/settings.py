"""Engine constants read from the ``[custom]`` section of domain.toml."""

from medtrack.domain import medtrack

_DEFAULTS = {
    "TAX_RATE": 0.05,
    "CURRENCY": "usd",
    "LOW_STOCK_THRESHOLD": 10,
    "PAYMENT_GATEWAY": "fake",
}


def setting(name: str):
    """Return a custom setting, falling back to the built-in default."""
    custom = medtrack.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])


def tax_rate() -> float:
    return float(setting("TAX_RATE"))


def currency() -> str:
    return str(setting("CURRENCY"))
