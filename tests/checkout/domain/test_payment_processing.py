"""Tests for payment attempts, results and the processor."""

import time

import pytest
from checkout.config import CheckoutSettings
from checkout.errors import PaymentError
from checkout.payment.attempt import AttemptStatus, PaymentAttempt
from checkout.payment.gateway.fake_adapter import FakeGateway
from checkout.payment.processor import PaymentProcessor
from checkout.payment.result import PaymentFailureCode, PaymentResult, PaymentStatus


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def processor(gateway):
    return PaymentProcessor(gateway=gateway, settings=CheckoutSettings(upi_wait_window_seconds=30))


def _charge(processor, method="card", last4="1111", session_id="sess-1"):
    return processor.charge(
        session_id=session_id,
        method=method,
        amount=130000,
        currency="INR",
        order_reference=session_id,
        last4=last4,
    )


class TestPaymentResult:
    def test_failure_raises_payment_error(self):
        result = PaymentResult.failure(PaymentFailureCode.PAYMENT_DECLINED, "Card declined")
        with pytest.raises(PaymentError) as exc:
            result.raise_for_failure()
        assert exc.value.code == "PAYMENT_DECLINED"
        assert exc.value.to_dict()["retryable"] is True

    def test_success_does_not_raise(self):
        PaymentResult.success("pay-1").raise_for_failure()

    def test_to_dict(self):
        assert PaymentResult.pending("pay-1", "Waiting").to_dict() == {
            "status": "pending",
            "payment_id": "pay-1",
            "message": "Waiting",
        }


class TestPaymentAttempt:
    def test_first_outcome_sticks(self):
        attempt = PaymentAttempt("sess-1", "card", 100, "INR")
        assert attempt.complete(PaymentResult.success("pay-1")) is True
        assert attempt.complete(PaymentResult.failure(PaymentFailureCode.GATEWAY_ERROR, "late")) is False
        assert attempt.result.is_success

    def test_expires_after_window(self):
        attempt = PaymentAttempt("sess-1", "upi", 100, "INR")
        attempt.await_confirmation("pay-1", window=60)
        try:
            assert attempt.expire_if_due(now=attempt.deadline - 1) is False
            assert attempt.expire_if_due(now=attempt.deadline) is True
        finally:
            attempt.cancel()

        assert attempt.status == AttemptStatus.COMPLETED
        assert attempt.result.failure_code == PaymentFailureCode.PAYMENT_TIMEOUT

    def test_timer_records_timeout(self):
        attempt = PaymentAttempt("sess-1", "upi", 100, "INR")
        attempt.await_confirmation("pay-1", window=0.05)
        deadline = time.monotonic() + 2
        while not attempt.is_terminal and time.monotonic() < deadline:
            time.sleep(0.01)

        assert attempt.result.failure_code == PaymentFailureCode.PAYMENT_TIMEOUT
        assert attempt.result.message == "Payment confirmation timed out. Please try again."

    def test_abort(self):
        attempt = PaymentAttempt("sess-1", "upi", 100, "INR")
        attempt.await_confirmation("pay-1", window=60)
        attempt.abort()
        assert attempt.result.failure_code == PaymentFailureCode.PAYMENT_ABORTED


class TestCharge:
    def test_card_success(self, processor, gateway):
        result = _charge(processor)
        assert result.status == PaymentStatus.SUCCESS
        assert result.transaction_id is not None
        assert gateway.calls[0]["amount"] == 130000

    def test_declined_card(self, processor):
        result = _charge(processor, last4="0002")
        assert result.is_failure
        assert result.failure_code == PaymentFailureCode.PAYMENT_DECLINED
        assert result.message == "Card declined"

    def test_configured_gateway_failure(self, processor, gateway):
        gateway.configure(should_succeed=False, failure_code="GATEWAY_ERROR", failure_message="Bank unavailable")
        result = _charge(processor)
        assert result.failure_code == PaymentFailureCode.GATEWAY_ERROR
        assert result.message == "Bank unavailable"

    def test_unknown_gateway_code_becomes_gateway_error(self, processor, gateway):
        gateway.configure(should_succeed=False, failure_code="SOMETHING_NEW")
        assert _charge(processor).failure_code == PaymentFailureCode.GATEWAY_ERROR

    def test_unsupported_method(self, processor, gateway):
        result = _charge(processor, method="barter")
        assert result.failure_code == PaymentFailureCode.UNSUPPORTED_METHOD
        assert gateway.calls == []

    def test_cash_on_delivery_skips_gateway(self, processor, gateway):
        result = _charge(processor, method="cod", last4=None)
        assert result.is_pending
        assert result.payment_id is None
        assert gateway.calls == []

    def test_successful_charge_not_repeated(self, processor, gateway):
        first = _charge(processor)
        second = _charge(processor)
        assert second == first
        assert len(gateway.calls) == 1


class TestAsynchronousConfirmation:
    def test_upi_waits_for_approval(self, processor, gateway):
        result = _charge(processor, method="upi", last4=None)
        try:
            assert result.is_pending
            assert processor.attempt_for("sess-1").status == AttemptStatus.AWAITING_CONFIRMATION

            assert processor.confirm("sess-1").is_pending

            gateway.approve(result.payment_id)
            confirmed = processor.confirm("sess-1")
            assert confirmed.is_success
        finally:
            processor.clear()

    def test_upi_rejected(self, processor, gateway):
        result = _charge(processor, method="upi", last4=None)
        gateway.reject(result.payment_id)
        confirmed = processor.confirm("sess-1")
        assert confirmed.failure_code == PaymentFailureCode.PAYMENT_DECLINED

    def test_upi_timeout(self, processor):
        _charge(processor, method="upi", last4=None)
        attempt = processor.attempt_for("sess-1")
        attempt.deadline = time.monotonic() - 1

        result = processor.confirm("sess-1")
        assert result.failure_code == PaymentFailureCode.PAYMENT_TIMEOUT

    def test_recharge_while_waiting_returns_pending(self, processor, gateway):
        _charge(processor, method="upi", last4=None)
        try:
            assert _charge(processor, method="upi", last4=None).is_pending
            assert len(gateway.calls) == 1
        finally:
            processor.clear()

    def test_confirm_without_attempt(self, processor):
        assert processor.confirm("nobody").failure_code == PaymentFailureCode.GATEWAY_ERROR


class TestSettledPaymentReuse:
    def test_same_order_reuses_the_charge(self, processor, gateway):
        first = _charge(processor)
        second = _charge(processor)

        assert second == first
        assert len([call for call in gateway.calls if call["method"] == "create_charge"]) == 1

    def test_changed_amount_is_refused(self, processor, gateway):
        _charge(processor)

        result = processor.charge(
            session_id="sess-1", method="card", amount=117000, currency="INR", order_reference="sess-1", last4="1111"
        )

        assert result.failure_code == PaymentFailureCode.INVALID_PAYMENT_DETAILS
        assert result.metadata["paid_amount"] == 130000
        assert result.metadata["order_amount"] == 117000
        assert len([call for call in gateway.calls if call["method"] == "create_charge"]) == 1
        assert processor.attempt_for("sess-1").is_paid

    def test_changed_method_is_refused(self, processor):
        _charge(processor)
        result = _charge(processor, method="cod", last4=None)
        assert result.failure_code == PaymentFailureCode.INVALID_PAYMENT_DETAILS

    def test_cash_on_delivery_is_repriced(self, processor):
        _charge(processor, method="cod", last4=None)

        result = processor.charge(
            session_id="sess-1", method="cod", amount=117000, currency="INR", order_reference="sess-1"
        )

        assert result.status == PaymentStatus.PENDING
        assert processor.attempt_for("sess-1").amount == 117000


class TestRetryAndAbort:
    def test_retry_resets_only_the_attempt(self, processor, gateway):
        _charge(processor, last4="0002")
        processor.retry("sess-1")
        assert processor.attempt_for("sess-1") is None

        assert _charge(processor).is_success
        assert len([call for call in gateway.calls if call["method"] == "create_charge"]) == 2

    def test_retry_cancels_pending_collect_request(self, processor, gateway):
        result = _charge(processor, method="upi", last4=None)
        processor.retry("sess-1")
        assert {"method": "cancel", "payment_id": result.payment_id} in gateway.calls

    def test_retry_keeps_a_settled_payment(self, processor):
        _charge(processor)
        processor.retry("sess-1")
        assert processor.attempt_for("sess-1").is_paid

    def test_abort(self, processor):
        _charge(processor, method="upi", last4=None)
        result = processor.abort("sess-1")
        assert result.failure_code == PaymentFailureCode.PAYMENT_ABORTED

    def test_abort_without_attempt(self, processor):
        assert processor.abort("nobody") is None


class TestAdapterSelection:
    def test_fake_gateway_by_default(self):
        from checkout.payment.gateway import get_gateway

        assert isinstance(get_gateway(), FakeGateway)

    def test_unknown_gateway_rejected(self, monkeypatch):
        from checkout.config import get_settings
        from checkout.payment.gateway import get_gateway

        monkeypatch.setenv("CHECKOUT_PAYMENT_GATEWAY", "acme")
        get_settings.cache_clear()

        with pytest.raises(ValueError, match="Unknown payment gateway: acme"):
            get_gateway()

    def test_unknown_order_submitter_rejected(self, monkeypatch):
        from checkout.config import get_settings
        from checkout.submission import get_submitter

        monkeypatch.setenv("CHECKOUT_ORDER_SUBMITTER", "acme")
        get_settings.cache_clear()

        with pytest.raises(ValueError, match="Unknown order submitter: acme"):
            get_submitter()
