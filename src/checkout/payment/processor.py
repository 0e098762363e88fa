"""Drives the gateway port and keeps one payment attempt per checkout session."""

import threading

import structlog

from checkout.config import get_settings
from checkout.payment.attempt import AttemptStatus, PaymentAttempt
from checkout.payment.gateway import get_gateway
from checkout.payment.gateway.port import FAILED, PENDING, SUCCEEDED, GatewayResponse
from checkout.payment.methods import ConfirmationMode, get_method_spec
from checkout.payment.result import PaymentFailureCode, PaymentResult

logger = structlog.get_logger(__name__)


def _failure_code(code: str | None) -> PaymentFailureCode:
    try:
        return PaymentFailureCode(code)
    except ValueError:
        return PaymentFailureCode.GATEWAY_ERROR


class PaymentProcessor:
    """Turns gateway responses into ``PaymentResult`` outcomes.

    Attempts are kept in process, keyed by checkout session id. Retrying
    replaces only the attempt; nothing about the session itself changes.
    """

    def __init__(self, gateway=None, settings=None) -> None:
        self._gateway = gateway
        self.settings = settings or get_settings()
        self._attempts: dict[str, PaymentAttempt] = {}
        self._lock = threading.Lock()

    @property
    def gateway(self):
        return self._gateway or get_gateway()

    def attempt_for(self, session_id: str) -> PaymentAttempt | None:
        return self._attempts.get(session_id)

    def charge(
        self,
        session_id: str,
        method: str,
        amount: int,
        currency: str,
        order_reference: str,
        last4: str | None = None,
    ) -> PaymentResult:
        spec = get_method_spec(method)
        if spec is None:
            return PaymentResult.failure(
                PaymentFailureCode.UNSUPPORTED_METHOD,
                f"Payment method {method!r} is not supported",
                metadata={"method": method},
            )

        with self._lock:
            existing = self._attempts.get(session_id)
            if existing and existing.status == AttemptStatus.AWAITING_CONFIRMATION:
                return PaymentResult.pending(existing.payment_id, "Awaiting payment confirmation")
            # A settled attempt is reused so resubmitting an order never charges twice
            if existing and existing.is_terminal and not existing.result.is_failure:
                if existing.matches(method, amount, currency):
                    return existing.result
            if existing and existing.is_paid:
                logger.warning(
                    "Order changed after payment",
                    session_id=session_id,
                    paid=existing.amount,
                    requested=amount,
                    method=method,
                )
                return PaymentResult.failure(
                    PaymentFailureCode.INVALID_PAYMENT_DETAILS,
                    "Order changed after payment. Restore the order you paid for to complete it.",
                    metadata={
                        "paid_amount": existing.amount,
                        "paid_method": existing.method,
                        "order_amount": amount,
                        "currency": currency,
                    },
                    payment_id=existing.payment_id,
                )

            attempt = PaymentAttempt(session_id, method, amount, currency)
            self._attempts[session_id] = attempt

        if spec.confirmation == ConfirmationMode.DEFERRED:
            result = PaymentResult.pending(message=f"Pay {spec.name.lower()} when your order arrives")
            attempt.complete(result)
            return result

        response = self.gateway.create_charge(
            amount=amount,
            currency=currency,
            order_reference=order_reference,
            payment_method_type=method,
            last4=last4,
        )

        if response.status == PENDING and spec.has_wait_window:
            attempt.await_confirmation(response.payment_id, spec.wait_window(self.settings))
            return PaymentResult.pending(response.payment_id, "Approve the payment request in your UPI app")

        result = self._to_result(response, method)
        attempt.payment_id = response.payment_id
        attempt.complete(result)
        return result

    def confirm(self, session_id: str) -> PaymentResult:
        """Poll the gateway for an attempt awaiting out-of-band confirmation."""
        attempt = self._attempts.get(session_id)
        if attempt is None:
            return PaymentResult.failure(
                PaymentFailureCode.GATEWAY_ERROR,
                "No payment is in progress for this checkout",
            )

        attempt.expire_if_due()
        if attempt.is_terminal:
            return attempt.result

        response = self.gateway.check_status(attempt.payment_id)
        if response.status == PENDING:
            return PaymentResult.pending(attempt.payment_id, "Awaiting payment confirmation")

        attempt.complete(self._to_result(response, attempt.method))
        return attempt.result

    def abort(self, session_id: str) -> PaymentResult | None:
        attempt = self._attempts.get(session_id)
        if attempt is None:
            return None

        if attempt.status == AttemptStatus.AWAITING_CONFIRMATION and attempt.payment_id:
            self.gateway.cancel(attempt.payment_id)
        attempt.abort()
        return attempt.result

    def retry(self, session_id: str) -> None:
        """Forget the current attempt so the next charge starts afresh.

        A settled payment is kept: the money has moved, so retrying never
        opens the way to a second charge.
        """
        with self._lock:
            attempt = self._attempts.get(session_id)
            if attempt is not None and attempt.is_paid:
                return
            attempt = self._attempts.pop(session_id, None)
        if attempt is not None:
            if attempt.status == AttemptStatus.AWAITING_CONFIRMATION and attempt.payment_id:
                self.gateway.cancel(attempt.payment_id)
            attempt.cancel()
            logger.info("Payment attempt reset for retry", session_id=session_id, payment_id=attempt.payment_id)

    def discard(self, session_id: str) -> None:
        attempt = self._attempts.pop(session_id, None)
        if attempt is not None:
            attempt.cancel()

    def clear(self) -> None:
        for session_id in list(self._attempts):
            self.discard(session_id)

    @staticmethod
    def _to_result(response: GatewayResponse, method: str) -> PaymentResult:
        if response.status == SUCCEEDED:
            return PaymentResult.success(response.payment_id, response.transaction_id)
        if response.status == PENDING:
            return PaymentResult.pending(response.payment_id)
        if response.status == FAILED:
            return PaymentResult.failure(
                _failure_code(response.failure_code),
                response.failure_message or "Payment failed",
                metadata={"method": method},
                payment_id=response.payment_id,
            )
        return PaymentResult.failure(
            PaymentFailureCode.GATEWAY_ERROR,
            f"Unexpected gateway status {response.status!r}",
            metadata={"method": method},
            payment_id=response.payment_id,
        )


_current_processor: PaymentProcessor | None = None


def get_processor() -> PaymentProcessor:
    global _current_processor
    if _current_processor is None:
        _current_processor = PaymentProcessor()
    return _current_processor


def reset_processor() -> None:
    global _current_processor
    if _current_processor is not None:
        _current_processor.clear()
    _current_processor = None
