"""CheckoutSession aggregate: the guest checkout state machine.

Steps run in a fixed order (contact, shipping, billing, payment, review).
A step is submitted with a flat mapping of field values; every field is
validated before anything changes, so a rejected submission leaves the
session exactly as it was. Completed steps are never forgotten: going back
to correct an earlier step keeps the later steps' data and completion.
"""

import json
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text, ValueObject

from checkout.domain import checkout
from checkout.errors import FieldValidationError, StepSequenceError
from checkout.pricing.money import LineItem
from checkout.session.details import (
    SENSITIVE_FIELDS,
    BillingDetails,
    ContactDetails,
    PaymentSelection,
    ShippingDetails,
    StepForm,
)
from checkout.session.events import (
    CheckoutCancelled,
    CheckoutStarted,
    CouponApplied,
    CouponRemoved,
    OrderSubmitted,
    StepCompleted,
)
from checkout.session.steps import (
    DATA_STEPS,
    STEP_ORDER,
    CheckoutStep,
    is_step_accessible,
    next_step,
    previous_step,
)
from checkout.validation.result import ValidationContext
from checkout.validation.rules import validate_fields

logger = structlog.get_logger(__name__)


class SessionStatus(Enum):
    ACTIVE = "Active"
    SUBMITTED = "Submitted"
    CANCELLED = "Cancelled"


@checkout.aggregate
class CheckoutSession:
    """One shopper's pass through checkout, scoped to a browsing session."""

    session_key: String(required=True, max_length=255)
    current_step: String(choices=CheckoutStep, default=CheckoutStep.CONTACT.value)
    completed_steps: Text()  # JSON array of step names
    contact: ValueObject(ContactDetails)
    shipping: ValueObject(ShippingDetails)
    billing: ValueObject(BillingDetails)
    payment: ValueObject(PaymentSelection)
    cart_items: Text()  # JSON: list of line items
    applied_coupons: Text()  # JSON array of coupon codes
    currency: String(max_length=3, default="INR")
    region: String(max_length=2, default="IN")
    status: String(choices=SessionStatus, default=SessionStatus.ACTIVE.value)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def current_step_must_be_reachable(self):
        current = self.current_step or CheckoutStep.CONTACT.value
        completed = self.completed
        if current == STEP_ORDER[0] or current in completed:
            return
        if previous_step(current) not in completed:
            raise ValidationError({"current_step": [f"Step {current!r} is not reachable"]})

    @invariant.post
    def completed_steps_must_have_data(self):
        for step in self.completed:
            if step not in DATA_STEPS:
                raise ValidationError({"completed_steps": [f"Unknown step {step!r}"]})
            if getattr(self, step) is None:
                raise ValidationError({"completed_steps": [f"Step {step!r} is completed but has no data"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, session_key, cart_items=(), currency="INR", region="IN"):
        now = datetime.now(UTC)
        items = [item if isinstance(item, LineItem) else LineItem.from_dict(item, currency) for item in cart_items]
        session = cls(
            session_key=session_key,
            current_step=CheckoutStep.CONTACT.value,
            completed_steps=json.dumps([]),
            cart_items=json.dumps([item.as_dict() for item in items]),
            applied_coupons=json.dumps([]),
            currency=currency,
            region=region,
            created_at=now,
            updated_at=now,
        )
        session.raise_(
            CheckoutStarted(
                session_id=str(session.id),
                session_key=session_key,
                item_count=sum(item.quantity for item in items),
            )
        )
        return session

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def completed(self) -> list[str]:
        return json.loads(self.completed_steps) if self.completed_steps else []

    @property
    def coupons(self) -> list[str]:
        return json.loads(self.applied_coupons) if self.applied_coupons else []

    @property
    def line_items(self) -> list[LineItem]:
        raw = json.loads(self.cart_items) if self.cart_items else []
        return [LineItem.from_dict(item, self.currency) for item in raw]

    @property
    def is_ready_for_review(self) -> bool:
        return all(step in self.completed for step in DATA_STEPS)

    def is_step_accessible(self, step) -> bool:
        return is_step_accessible(step, self.current_step, self.completed)

    def step_values(self, step) -> dict:
        """Current data of a step as flat form values (for pre-filling a form)."""
        details = getattr(self, step, None) if step in DATA_STEPS else None
        if details is None:
            return {}
        values = details.to_dict()
        for name in SENSITIVE_FIELDS.get(step, ()):
            values.pop(name, None)
        address = values.pop("address", None)
        if address:
            values.update(address)
        return values

    def validation_context(self) -> ValidationContext:
        return ValidationContext(region=self.region)

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------
    def navigate_to(self, step) -> bool:
        """Move to ``step`` if it is accessible. Returns False (no change) otherwise."""
        if not self.is_step_accessible(step) or self.status != SessionStatus.ACTIVE.value:
            logger.info(
                "Navigation rejected",
                session_id=str(self.id),
                target=step,
                current_step=self.current_step,
            )
            return False

        if step != self.current_step:
            with atomic_change(self):
                self.current_step = step
                self.updated_at = datetime.now(UTC)
        return True

    # -------------------------------------------------------------------
    # Step submission
    # -------------------------------------------------------------------
    def submit_step(self, step, data, context: ValidationContext | None = None):
        """Validate and store a step's data, then advance to the following step.

        Raises:
            StepSequenceError: if ``step`` is not accessible from the current step.
            FieldValidationError: with ``{field: [message]}`` when any field is invalid.
        """
        self.ensure_active()
        if step == CheckoutStep.REVIEW.value:
            raise ValidationError({"step": ["The review step places the order and takes no data"]})
        if not self.is_step_accessible(step):
            raise StepSequenceError(step, self.current_step)

        values = StepForm.normalize(step, data)

        errors = StepForm.extra_errors(step, values)
        errors.update(validate_fields(values, StepForm.fields(step, values), context or self.validation_context()))
        if errors:
            logger.info(
                "Checkout step rejected",
                session_id=str(self.id),
                step=step,
                fields=sorted(errors),
            )
            raise FieldValidationError({field: [message] for field, message in errors.items()})

        details = StepForm.build(step, values)
        following = next_step(step)
        completed = self.completed
        if step not in completed:
            completed.append(step)

        with atomic_change(self):
            setattr(self, step, details)
            self.completed_steps = json.dumps(completed)
            self.current_step = following
            self.updated_at = datetime.now(UTC)

        self.raise_(StepCompleted(session_id=str(self.id), step=step, next_step=following))
        return following

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code, engine):
        """Apply a coupon code after the pricing engine accepts it.

        Raises:
            ValidationError: ``{"coupon_code": [reason]}`` when the coupon is rejected.
        """
        self.ensure_active()
        outcome = engine.check_coupon(
            coupon_code,
            self.line_items,
            shipping_method=self.shipping.shipping_method if self.shipping else None,
            applied_codes=self.coupons,
        )
        if not outcome.applied:
            raise ValidationError({"coupon_code": [outcome.reason]})

        coupons = self.coupons + [outcome.code]
        with atomic_change(self):
            self.applied_coupons = json.dumps(coupons)
            self.updated_at = datetime.now(UTC)

        self.raise_(CouponApplied(session_id=str(self.id), coupon_code=outcome.code))
        return outcome

    def remove_coupon(self, coupon_code):
        self.ensure_active()
        coupons = self.coupons
        if coupon_code not in coupons:
            raise ValidationError({"coupon_code": ["Coupon is not applied"]})

        coupons.remove(coupon_code)
        with atomic_change(self):
            self.applied_coupons = json.dumps(coupons)
            self.updated_at = datetime.now(UTC)

        self.raise_(CouponRemoved(session_id=str(self.id), coupon_code=coupon_code))

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def price(self, engine):
        return engine.price(
            self.line_items,
            shipping_method=self.shipping.shipping_method if self.shipping else None,
            coupon_codes=self.coupons,
            gift_wrap=bool(self.shipping and self.shipping.gift_wrap),
            payment_method=self.payment.method if self.payment else None,
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def ensure_active(self):
        if SessionStatus(self.status) != SessionStatus.ACTIVE:
            raise ValidationError({"status": [f"Checkout is already {self.status.lower()}"]})

    def cancel(self):
        self.ensure_active()
        with atomic_change(self):
            self.status = SessionStatus.CANCELLED.value
            self.updated_at = datetime.now(UTC)

        self.raise_(CheckoutCancelled(session_id=str(self.id), step=self.current_step))

    def mark_submitted(self, order_id, payment_status, totals):
        self.ensure_active()
        with atomic_change(self):
            self.status = SessionStatus.SUBMITTED.value
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderSubmitted(
                session_id=str(self.id),
                order_id=order_id,
                payment_method=self.payment.method,
                payment_status=payment_status,
                total=totals.total,
                currency=totals.currency,
                items=self.cart_items,
            )
        )
