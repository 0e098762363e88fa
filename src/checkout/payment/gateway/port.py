"""Payment gateway port (abstract interface).

The checkout only ever sends ``{amount, currency, order_reference}`` (plus
the method type and, for cards, the last four digits) and only ever reads
back the normalized ``GatewayResponse``. Card numbers and CVVs never cross
this boundary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

SUCCEEDED = "succeeded"
PENDING = "pending"
FAILED = "failed"


@dataclass(frozen=True)
class GatewayResponse:
    """Normalized answer from the gateway."""

    payment_id: str | None
    status: str
    transaction_id: str | None = None
    failure_code: str | None = None
    failure_message: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_charge(
        self,
        amount: int,
        currency: str,
        order_reference: str,
        payment_method_type: str,
        last4: str | None = None,
    ) -> GatewayResponse:
        """Start a charge. Asynchronous methods answer ``pending``."""
        ...

    @abstractmethod
    def check_status(self, payment_id: str) -> GatewayResponse:
        """Current status of a previously created charge."""
        ...

    @abstractmethod
    def cancel(self, payment_id: str) -> None:
        """Withdraw a pending charge (e.g. an unanswered UPI collect request)."""
        ...
