"""A single payment attempt and its confirmation timer."""

import threading
import time
from enum import Enum

import structlog

from checkout.payment.result import PaymentFailureCode, PaymentResult, PaymentStatus

logger = structlog.get_logger(__name__)


class AttemptStatus(Enum):
    CREATED = "created"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMPLETED = "completed"


class PaymentAttempt:
    """One try at paying for a checkout session.

    Asynchronous methods wait for confirmation within a bounded window. A
    ``threading.Timer`` turns the attempt into a ``PAYMENT_TIMEOUT`` failure
    when the window lapses; the timer is cancelled as soon as any terminal
    outcome is recorded. ``expire_if_due`` performs the same check
    synchronously for callers that poll.
    """

    def __init__(self, session_id: str, method: str, amount: int, currency: str) -> None:
        self.session_id = session_id
        self.method = method
        self.amount = amount
        self.currency = currency
        self.payment_id: str | None = None
        self.status = AttemptStatus.CREATED
        self.result: PaymentResult | None = None
        self.deadline: float | None = None
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def is_terminal(self) -> bool:
        return self.status == AttemptStatus.COMPLETED

    @property
    def is_paid(self) -> bool:
        """Money has moved for this attempt."""
        return self.is_terminal and self.result.status == PaymentStatus.SUCCESS

    def matches(self, method: str, amount: int, currency: str) -> bool:
        return (self.method, self.amount, self.currency) == (method, amount, currency)

    def await_confirmation(self, payment_id: str, window: float) -> None:
        """Start the wait window for an out-of-band confirmation."""
        with self._lock:
            self.payment_id = payment_id
            self.status = AttemptStatus.AWAITING_CONFIRMATION
            self.deadline = time.monotonic() + window
            self._timer = threading.Timer(window, self._on_timeout)
            self._timer.daemon = True
            self._timer.start()

        logger.info(
            "Awaiting payment confirmation",
            session_id=self.session_id,
            payment_id=payment_id,
            window_seconds=window,
        )

    def _on_timeout(self) -> None:
        self.complete(self._timeout_result())

    def _timeout_result(self) -> PaymentResult:
        return PaymentResult.failure(
            PaymentFailureCode.PAYMENT_TIMEOUT,
            "Payment confirmation timed out. Please try again.",
            metadata={"method": self.method},
            payment_id=self.payment_id,
        )

    def expire_if_due(self, now: float | None = None) -> bool:
        """Record a timeout if the wait window has lapsed. Returns True if it did."""
        if self.status != AttemptStatus.AWAITING_CONFIRMATION or self.deadline is None:
            return False
        if (now if now is not None else time.monotonic()) < self.deadline:
            return False
        return self.complete(self._timeout_result())

    def complete(self, result: PaymentResult) -> bool:
        """Record a terminal outcome. Only the first outcome sticks."""
        with self._lock:
            if self.status == AttemptStatus.COMPLETED:
                return False
            self.status = AttemptStatus.COMPLETED
            self.result = result
            self._cancel_timer()

        log = logger.warning if result.is_failure else logger.info
        log(
            "Payment attempt completed",
            session_id=self.session_id,
            payment_id=self.payment_id,
            status=result.status.value,
            code=result.failure_code.value if result.failure_code else None,
        )
        return True

    def abort(self) -> bool:
        return self.complete(
            PaymentResult.failure(
                PaymentFailureCode.PAYMENT_ABORTED,
                "Payment was cancelled",
                metadata={"method": self.method},
                payment_id=self.payment_id,
            )
        )

    def cancel(self) -> None:
        """Stop the confirmation timer without recording an outcome."""
        with self._lock:
            self._cancel_timer()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
