"""Fake order submitter: records payloads and hands out order numbers.

Configurable to simulate an unreachable order service.
"""

from uuid import uuid4

from checkout.errors import SubmissionNetworkError
from checkout.submission.port import OrderSubmissionPort


class FakeOrderSubmitter(OrderSubmissionPort):
    """Fake submitter that always accepts orders by default."""

    def __init__(self):
        self.should_succeed = True
        self.failure_reason = "Order service unavailable"
        self.submitted: list[dict] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Order service unavailable"):
        """Configure the fake submitter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def submit(self, payload: dict) -> str:
        if not self.should_succeed:
            raise SubmissionNetworkError(self.failure_reason)

        order_id = f"ORD-{uuid4().hex[:10].upper()}"
        self.submitted.append({"order_id": order_id, **payload})
        return order_id
