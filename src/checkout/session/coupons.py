"""Checkout coupon management: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.persistence.adapter import get_persistence
from checkout.pricing.coupons import normalize_coupon_code
from checkout.pricing.engine import PricingEngine
from checkout.session.session import CheckoutSession


@checkout.command(part_of="CheckoutSession")
class ApplyCoupon:
    """Apply a coupon code to a checkout session."""

    session_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=100)


@checkout.command(part_of="CheckoutSession")
class RemoveCoupon:
    session_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=100)


@checkout.command_handler(part_of=CheckoutSession)
class CouponHandler:
    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        code = normalize_coupon_code(command.coupon_code)
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        outcome = session.apply_coupon(code, PricingEngine())
        repo.add(session)
        get_persistence().save(session)
        return outcome.amount

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.remove_coupon(command.coupon_code.strip().upper())
        repo.add(session)
        get_persistence().save(session)
