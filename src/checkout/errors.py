"""Error taxonomy for the checkout flow.

Field errors reuse Protean's ``{field: [messages]}`` shape so command handlers,
tests and the API layer treat them like every other domain validation failure.
"""

from protean.exceptions import InvalidOperationError, ValidationError


class FieldValidationError(ValidationError):
    """One or more fields of a step failed validation.

    Blocks only the owning step from advancing; the session is left untouched.
    """


class StepSequenceError(Exception):
    """Attempt to navigate to, or submit, a step that is not accessible."""

    def __init__(self, target: str, current: str) -> None:
        super().__init__(f"Step {target!r} is not accessible from {current!r}")
        self.target = target
        self.current = current


class PersistenceError(Exception):
    """A stored session snapshot could not be restored."""


class IncompleteCheckoutError(InvalidOperationError):
    """The order payload was requested before every data step was completed."""


class PaymentError(Exception):
    """A payment attempt ended in failure.

    Always surfaced to the shopper together with a retry affordance.
    """

    def __init__(self, code: str, message: str, step: str = "payment", metadata: dict | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.step = step
        self.metadata = metadata or {}

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "step": self.step,
            "metadata": self.metadata,
            "retryable": True,
        }


class SubmissionNetworkError(Exception):
    """The order-submission boundary could not be reached.

    The session is retained so the shopper can resubmit without data loss.
    """

    retryable = True
