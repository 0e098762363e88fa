"""Order pricing: subtotal, coupons and automatic discounts, tax, shipping and charges.

All arithmetic is on integer minor units:

    total = subtotal - discount + shipping + tax + sum(additional charges)

Coupons that do not qualify are reported with a reason and contribute nothing.
"""

from dataclasses import dataclass, field
from datetime import datetime

import structlog

from checkout.config import get_settings
from checkout.pricing.catalog import CouponCatalog, get_catalog
from checkout.pricing.charges import AdditionalCharge, additional_charges
from checkout.pricing.coupons import (
    Coupon,
    CouponOutcome,
    DiscountType,
    discount_amount,
    eligibility_error,
)
from checkout.pricing.money import LineItem, format_amount
from checkout.pricing.shipping import shipping_price
from checkout.pricing.tax import TaxComponent, TaxPolicy, split_tax

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PriceBreakdown:
    currency: str
    subtotal: int
    savings: int
    discount: int
    shipping: int
    tax: int
    total: int
    tax_components: tuple[TaxComponent, ...] = ()
    charges: tuple[AdditionalCharge, ...] = ()
    coupons: tuple[CouponOutcome, ...] = ()
    rejected_coupons: tuple[CouponOutcome, ...] = ()

    @property
    def additional_charges_total(self) -> int:
        return sum(charge.amount for charge in self.charges)

    def to_dict(self) -> dict:
        def money(amount):
            return {"amount": amount, "formatted": format_amount(amount, self.currency)}

        return {
            "currency": self.currency,
            "subtotal": money(self.subtotal),
            "savings": money(self.savings),
            "discount": money(self.discount),
            "shipping": money(self.shipping),
            "tax": money(self.tax),
            "tax_components": [
                {
                    "name": component.name,
                    "rate_percent": component.rate_percent,
                    "taxable_base": money(component.taxable_base),
                    "amount": money(component.amount),
                }
                for component in self.tax_components
            ],
            "additional_charges": [
                {"code": charge.code, "label": charge.label, "amount": money(charge.amount)} for charge in self.charges
            ],
            "coupons": [
                {"code": outcome.code, "amount": money(outcome.amount), "automatic": outcome.automatic}
                for outcome in self.coupons
            ],
            "rejected_coupons": [{"code": outcome.code, "reason": outcome.reason} for outcome in self.rejected_coupons],
            "total": money(self.total),
        }


def subtotal_of(items) -> int:
    return sum(item.line_total for item in items)


@dataclass
class _Discounts:
    """Running tally that keeps merchandise and shipping discounts within bounds."""

    subtotal: int
    shipping: int
    merchandise: int = 0
    shipping_discount: int = 0
    applied: list = field(default_factory=list)
    rejected: list = field(default_factory=list)

    def take(self, coupon: Coupon, requested: int) -> int:
        if DiscountType(coupon.discount_type) == DiscountType.SHIPPING:
            granted = min(requested, self.shipping - self.shipping_discount)
            self.shipping_discount += granted
        else:
            granted = min(requested, self.subtotal - self.merchandise)
            self.merchandise += granted
        return granted


class PricingEngine:
    """Prices an order from its line items and the shopper's selections."""

    def __init__(self, catalog: CouponCatalog | None = None, policy: TaxPolicy | None = None, settings=None) -> None:
        self.settings = settings or get_settings()
        self.catalog = catalog or get_catalog()
        self.policy = policy or TaxPolicy.from_settings(self.settings)

    def check_coupon(
        self,
        code: str,
        items,
        shipping_method: str | None = None,
        applied_codes=(),
        now: datetime | None = None,
    ) -> CouponOutcome:
        """Evaluate a shopper-entered code against the order without changing anything."""
        if code in applied_codes:
            return CouponOutcome.rejected(code, "Coupon already applied")

        coupon = self.catalog.find(code)
        if coupon is None:
            return CouponOutcome.rejected(code, "Invalid coupon code")

        subtotal = subtotal_of(items)
        reason = eligibility_error(coupon, subtotal, self.settings.currency, now)
        if reason:
            return CouponOutcome.rejected(code, reason)

        amount = discount_amount(coupon, subtotal, shipping_price(shipping_method), items)
        return CouponOutcome(code=coupon.code, applied=True, amount=amount)

    def price(
        self,
        items: list[LineItem],
        shipping_method: str | None = None,
        coupon_codes=(),
        gift_wrap: bool = False,
        payment_method: str | None = None,
        now: datetime | None = None,
    ) -> PriceBreakdown:
        currency = self.settings.currency
        subtotal = subtotal_of(items)
        shipping = shipping_price(shipping_method)
        savings = sum(item.savings for item in items)

        tally = _Discounts(subtotal=subtotal, shipping=shipping)
        candidates = [(code, self.catalog.find(code), False) for code in coupon_codes]
        candidates += [(coupon.code, coupon, True) for coupon in self.catalog.automatic_discounts()]

        for code, coupon, automatic in candidates:
            if coupon is None:
                tally.rejected.append(CouponOutcome.rejected(code, "Invalid coupon code"))
                continue

            reason = eligibility_error(coupon, subtotal, currency, now)
            if reason:
                # Automatic discounts the order does not qualify for are not reported
                if not automatic:
                    tally.rejected.append(CouponOutcome.rejected(code, reason))
                continue

            granted = tally.take(coupon, discount_amount(coupon, subtotal, shipping, items))
            tally.applied.append(CouponOutcome(code=coupon.code, applied=True, amount=granted, automatic=automatic))

        discount = tally.merchandise + tally.shipping_discount
        tax_components = split_tax(self.policy.taxable_base(subtotal, tally.merchandise), self.policy)
        tax = sum(component.amount for component in tax_components)
        charges = tuple(additional_charges(gift_wrap, payment_method, self.settings))

        total = subtotal - discount + shipping + tax + sum(charge.amount for charge in charges)

        if tally.rejected:
            logger.info(
                "Coupons not applied",
                codes=[outcome.code for outcome in tally.rejected],
                reasons=[outcome.reason for outcome in tally.rejected],
            )

        return PriceBreakdown(
            currency=currency,
            subtotal=subtotal,
            savings=savings,
            discount=discount,
            shipping=shipping,
            tax=tax,
            total=total,
            tax_components=tax_components,
            charges=charges,
            coupons=tuple(tally.applied),
            rejected_coupons=tuple(tally.rejected),
        )
