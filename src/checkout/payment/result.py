"""Normalized payment outcome: success, pending or failure."""

from dataclasses import dataclass, field
from enum import Enum

from checkout.errors import PaymentError


class PaymentStatus(Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"


class PaymentFailureCode(Enum):
    PAYMENT_TIMEOUT = "PAYMENT_TIMEOUT"
    PAYMENT_DECLINED = "PAYMENT_DECLINED"
    PAYMENT_ABORTED = "PAYMENT_ABORTED"
    INVALID_PAYMENT_DETAILS = "INVALID_PAYMENT_DETAILS"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    UNSUPPORTED_METHOD = "UNSUPPORTED_METHOD"


@dataclass(frozen=True)
class PaymentResult:
    status: PaymentStatus
    payment_id: str | None = None
    transaction_id: str | None = None
    failure_code: PaymentFailureCode | None = None
    message: str | None = None
    step: str = "payment"
    metadata: dict = field(default_factory=dict)

    @classmethod
    def success(cls, payment_id: str, transaction_id: str | None = None) -> "PaymentResult":
        return cls(status=PaymentStatus.SUCCESS, payment_id=payment_id, transaction_id=transaction_id)

    @classmethod
    def pending(cls, payment_id: str | None = None, message: str | None = None) -> "PaymentResult":
        return cls(status=PaymentStatus.PENDING, payment_id=payment_id, message=message)

    @classmethod
    def failure(
        cls,
        code: PaymentFailureCode,
        message: str,
        step: str = "payment",
        metadata: dict | None = None,
        payment_id: str | None = None,
    ) -> "PaymentResult":
        return cls(
            status=PaymentStatus.FAILURE,
            payment_id=payment_id,
            failure_code=code,
            message=message,
            step=step,
            metadata=metadata or {},
        )

    @property
    def is_success(self) -> bool:
        return self.status == PaymentStatus.SUCCESS

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    @property
    def is_failure(self) -> bool:
        return self.status == PaymentStatus.FAILURE

    def raise_for_failure(self) -> None:
        if self.is_failure:
            raise PaymentError(self.failure_code.value, self.message, self.step, self.metadata)

    def to_dict(self) -> dict:
        data = {"status": self.status.value, "payment_id": self.payment_id}
        if self.transaction_id:
            data["transaction_id"] = self.transaction_id
        if self.is_failure:
            data.update(
                code=self.failure_code.value,
                message=self.message,
                step=self.step,
                metadata=self.metadata,
            )
        elif self.message:
            data["message"] = self.message
        return data
