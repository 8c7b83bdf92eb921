"""Payment gateway registry.

The active adapter is built on first use from the ``PAYMENT_GATEWAY``
setting in domain.toml. Only ``fake`` ships with the engine; deployments
backed by a real provider install their adapter at startup with
``set_gateway``.
"""

import structlog
from protean.exceptions import ConfigurationError

from medtrack.gateway.fake_adapter import FakeGateway
from medtrack.gateway.port import PaymentGateway
from medtrack.shared.settings import setting

logger = structlog.get_logger(__name__)

ADAPTERS: dict[str, type[PaymentGateway]] = {"fake": FakeGateway}

_active: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _active
    if _active is None:
        name = str(setting("PAYMENT_GATEWAY")).lower()
        if name not in ADAPTERS:
            raise ConfigurationError(
                f"Unknown payment gateway '{name}'. Available: {', '.join(sorted(ADAPTERS))}"
            )
        _active = ADAPTERS[name]()
        logger.info("Payment gateway installed", gateway=type(_active).__name__)
    return _active


def set_gateway(gateway: PaymentGateway) -> None:
    if not isinstance(gateway, PaymentGateway):
        raise TypeError(f"{type(gateway).__name__} does not implement PaymentGateway")
    global _active
    _active = gateway


def reset_gateway() -> None:
    """Drop the active adapter so the next lookup rebuilds it from settings."""
    global _active
    _active = None
