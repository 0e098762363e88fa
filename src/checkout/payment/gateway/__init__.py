"""Payment gateway selection.

The adapter is chosen by ``CHECKOUT_PAYMENT_GATEWAY`` the first time it is
needed; tests swap it with ``set_gateway()``.
"""

import structlog

from checkout.config import get_settings
from checkout.payment.gateway.fake_adapter import FakeGateway
from checkout.payment.gateway.port import PaymentGateway

logger = structlog.get_logger(__name__)

GATEWAY_ADAPTERS: dict[str, type[PaymentGateway]] = {
    "fake": FakeGateway,
}

_active_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _active_gateway
    if _active_gateway is None:
        name = get_settings().payment_gateway
        adapter = GATEWAY_ADAPTERS.get(name)
        if adapter is None:
            raise ValueError(f"Unknown payment gateway: {name}")
        _active_gateway = adapter()
        logger.info("Payment gateway selected", gateway=name)
    return _active_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _active_gateway
    _active_gateway = gateway


def reset_gateway() -> None:
    global _active_gateway
    _active_gateway = None
