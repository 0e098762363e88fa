"""Configurable fake payment gateway for development and testing.

Simulates a gateway without external calls. It can be told to decline,
to fail outright, or to leave asynchronous (UPI) charges pending until
``approve()`` or ``reject()`` is called, which is how tests exercise the
confirmation window.

Like a real gateway's test mode, the card ending in 0002 is always declined.
"""

from uuid import uuid4

from checkout.payment.gateway.port import FAILED, PENDING, SUCCEEDED, GatewayResponse, PaymentGateway

DECLINED_CARD_LAST4 = "0002"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_code: str = "PAYMENT_DECLINED"
        self.failure_message: str = "Payment was declined by the bank"
        self.asynchronous_methods: set[str] = {"upi"}
        self.charges: dict[str, GatewayResponse] = {}
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_code: str = "PAYMENT_DECLINED",
        failure_message: str = "Payment was declined by the bank",
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_code = failure_code
        self.failure_message = failure_message

    def create_charge(
        self,
        amount: int,
        currency: str,
        order_reference: str,
        payment_method_type: str,
        last4: str | None = None,
    ) -> GatewayResponse:
        self.calls.append(
            {
                "method": "create_charge",
                "amount": amount,
                "currency": currency,
                "order_reference": order_reference,
                "payment_method_type": payment_method_type,
                "last4": last4,
            }
        )

        payment_id = f"fake_pay_{uuid4().hex[:12]}"

        if not self.should_succeed or last4 == DECLINED_CARD_LAST4:
            response = GatewayResponse(
                payment_id=payment_id,
                status=FAILED,
                failure_code=self.failure_code if not self.should_succeed else "PAYMENT_DECLINED",
                failure_message=self.failure_message if not self.should_succeed else "Card declined",
            )
        elif payment_method_type in self.asynchronous_methods:
            response = GatewayResponse(payment_id=payment_id, status=PENDING)
        else:
            response = GatewayResponse(
                payment_id=payment_id,
                status=SUCCEEDED,
                transaction_id=f"fake_txn_{uuid4().hex[:12]}",
            )

        self.charges[payment_id] = response
        return response

    def check_status(self, payment_id: str) -> GatewayResponse:
        self.calls.append({"method": "check_status", "payment_id": payment_id})
        return self.charges.get(
            payment_id,
            GatewayResponse(
                payment_id=payment_id,
                status=FAILED,
                failure_code="GATEWAY_ERROR",
                failure_message="Unknown payment",
            ),
        )

    def cancel(self, payment_id: str) -> None:
        self.calls.append({"method": "cancel", "payment_id": payment_id})
        self.charges.pop(payment_id, None)

    def approve(self, payment_id: str) -> None:
        """Simulate the shopper approving a pending collect request."""
        self.charges[payment_id] = GatewayResponse(
            payment_id=payment_id,
            status=SUCCEEDED,
            transaction_id=f"fake_txn_{uuid4().hex[:12]}",
        )

    def reject(self, payment_id: str, message: str = "Collect request declined") -> None:
        """Simulate the shopper declining a pending collect request."""
        self.charges[payment_id] = GatewayResponse(
            payment_id=payment_id,
            status=FAILED,
            failure_code="PAYMENT_DECLINED",
            failure_message=message,
        )
