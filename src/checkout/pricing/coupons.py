"""Coupon value object and the rules that decide what a coupon is worth."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from checkout.domain import checkout
from checkout.pricing.money import format_amount

COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9_-]+$")


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    SHIPPING = "shipping"
    BUY_X_GET_Y = "buy_x_get_y"


@checkout.value_object
class Coupon:
    """A discount offer, either redeemed by code or applied automatically.

    ``value`` is a whole percentage for percentage coupons and an amount in
    minor units for fixed coupons. Shipping and buy-x-get-y coupons ignore it.
    """

    code: String(required=True, max_length=50)
    description: String(max_length=255)
    discount_type: String(required=True, choices=DiscountType)
    value: Integer(default=0, min_value=0)
    minimum_amount: Integer(min_value=0)
    maximum_discount: Integer(min_value=0)
    starts_at: DateTime()
    expires_at: DateTime()
    usage_limit: Integer(min_value=0)
    used_count: Integer(default=0, min_value=0)
    buy_quantity: Integer(min_value=1)
    get_quantity: Integer(min_value=1)
    automatic: Boolean(default=False)

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.value or 0) > 100:
            raise ValidationError({"value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def buy_x_get_y_needs_quantities(self):
        if self.discount_type == DiscountType.BUY_X_GET_Y.value and not (self.buy_quantity and self.get_quantity):
            raise ValidationError({"buy_quantity": ["Buy and get quantities are required"]})


@dataclass(frozen=True)
class CouponOutcome:
    """Result of evaluating one coupon against an order."""

    code: str
    applied: bool
    amount: int = 0
    reason: str | None = None
    automatic: bool = False

    @classmethod
    def rejected(cls, code: str, reason: str, automatic: bool = False) -> "CouponOutcome":
        return cls(code=code, applied=False, reason=reason, automatic=automatic)


def normalize_coupon_code(code: str | None) -> str:
    """Upper-case and check the shape of a shopper-entered coupon code.

    Raises:
        ValidationError: with a ``coupon_code`` message when the code is malformed.
    """
    code = (code or "").strip().upper()
    if not code:
        raise ValidationError({"coupon_code": ["Please enter a coupon code"]})
    if len(code) < 3:
        raise ValidationError({"coupon_code": ["Coupon code must be at least 3 characters"]})
    if len(code) > 50:
        raise ValidationError({"coupon_code": ["Coupon code cannot exceed 50 characters"]})
    if not COUPON_CODE_PATTERN.match(code):
        raise ValidationError(
            {"coupon_code": ["Coupon code can only contain letters, numbers, hyphens, and underscores"]}
        )
    return code


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def eligibility_error(coupon: Coupon, subtotal: int, currency: str = "INR", now: datetime | None = None) -> str | None:
    """Return why ``coupon`` cannot be used on an order of ``subtotal``, or None."""
    now = _aware(now or datetime.now(UTC))

    if coupon.starts_at and now < _aware(coupon.starts_at):
        return f"Coupon is not yet valid. Starts from {_aware(coupon.starts_at).strftime('%d %b %Y')}"
    if coupon.expires_at and now > _aware(coupon.expires_at):
        return "Coupon has expired"
    if coupon.usage_limit is not None and (coupon.used_count or 0) >= coupon.usage_limit:
        return "Coupon usage limit reached"
    if coupon.minimum_amount and subtotal < coupon.minimum_amount:
        return f"Minimum order value of {format_amount(coupon.minimum_amount, currency, decimals=False)} required"
    return None


def discount_amount(coupon: Coupon, subtotal: int, shipping: int = 0, items=()) -> int:
    """Discount a coupon is worth, before clamping against other coupons.

    ``items`` is a sequence of LineItem and is only consulted by buy-x-get-y.
    """
    discount_type = DiscountType(coupon.discount_type)

    if discount_type == DiscountType.PERCENTAGE:
        amount = subtotal * (coupon.value or 0) // 100
        if coupon.maximum_discount is not None:
            amount = min(amount, coupon.maximum_discount)
        return amount

    if discount_type == DiscountType.FIXED:
        return min(coupon.value or 0, subtotal)

    if discount_type == DiscountType.SHIPPING:
        return shipping

    # Buy X get Y: every (buy + get) units of a line earn `get` free units
    bundle = coupon.buy_quantity + coupon.get_quantity
    amount = sum((item.quantity // bundle) * coupon.get_quantity * item.unit_price.amount for item in items)
    if coupon.maximum_discount is not None:
        amount = min(amount, coupon.maximum_discount)
    return amount
