"""Tests for the pricing engine."""

from datetime import UTC, datetime

import pytest
from checkout.pricing.catalog import InMemoryCouponCatalog
from checkout.pricing.coupons import Coupon, DiscountType
from checkout.pricing.engine import PricingEngine, subtotal_of
from checkout.pricing.money import LineItem
from checkout.pricing.tax import TaxPolicy


def _items(*lines):
    return [LineItem.from_dict({"unit_price": price, "quantity": quantity}) for price, quantity in lines]


@pytest.fixture()
def items():
    return _items((500, 2), (300, 1))


@pytest.fixture()
def flat_catalog():
    return InMemoryCouponCatalog([Coupon(code="FLAT1", discount_type=DiscountType.FIXED.value, value=100)])


class TestWorkedExample:
    def test_subtotal(self, items):
        assert subtotal_of(items) == 1300

    def test_tax_on_pre_discount_base(self, items, flat_catalog):
        engine = PricingEngine(catalog=flat_catalog, policy=TaxPolicy(on_discounted_base=False))
        breakdown = engine.price(items, shipping_method="standard", coupon_codes=["FLAT1"])

        assert breakdown.subtotal == 1300
        assert [component.amount for component in breakdown.tax_components] == [117, 117]
        assert breakdown.tax == 234
        assert breakdown.discount == 100
        assert breakdown.shipping == 0
        assert breakdown.total == 1434

    def test_tax_on_discounted_base_by_default(self, items, flat_catalog):
        breakdown = PricingEngine(catalog=flat_catalog).price(items, coupon_codes=["FLAT1"])

        assert [component.name for component in breakdown.tax_components] == ["CGST", "SGST"]
        assert breakdown.tax_components[0].taxable_base == 1200
        assert breakdown.tax_components[0].rate_percent == 9
        assert breakdown.tax == 216
        assert breakdown.total == 1416

    def test_total_identity(self, items, flat_catalog):
        breakdown = PricingEngine(catalog=flat_catalog).price(
            items, shipping_method="express", coupon_codes=["FLAT1"], gift_wrap=True, payment_method="cod"
        )
        assert breakdown.total == (
            breakdown.subtotal
            - breakdown.discount
            + breakdown.shipping
            + breakdown.tax
            + breakdown.additional_charges_total
        )


class TestShippingAndCharges:
    def test_shipping_price_from_method(self, items):
        engine = PricingEngine(catalog=InMemoryCouponCatalog([]))
        assert engine.price(items, shipping_method="express").shipping == 15000
        assert engine.price(items, shipping_method="overnight").shipping == 30000
        assert engine.price(items).shipping == 0

    def test_gift_wrap_and_cash_on_delivery_fees(self, items):
        engine = PricingEngine(catalog=InMemoryCouponCatalog([]))
        breakdown = engine.price(items, gift_wrap=True, payment_method="cod")
        assert [(charge.code, charge.amount) for charge in breakdown.charges] == [
            ("gift_wrap", 5000),
            ("cod_fee", 5000),
        ]

    def test_card_has_no_fee(self, items):
        engine = PricingEngine(catalog=InMemoryCouponCatalog([]))
        assert engine.price(items, payment_method="card").charges == ()


class TestCoupons:
    def test_unknown_code_reported(self, items):
        breakdown = PricingEngine(catalog=InMemoryCouponCatalog([])).price(items, coupon_codes=["NOPE"])
        assert breakdown.discount == 0
        assert breakdown.rejected_coupons[0].reason == "Invalid coupon code"

    def test_percentage_capped_and_automatic_discount(self):
        items = _items((1000000, 1))
        breakdown = PricingEngine().price(items, coupon_codes=["WELCOME10"])

        amounts = {outcome.code: (outcome.amount, outcome.automatic) for outcome in breakdown.coupons}
        assert amounts == {"WELCOME10": (50000, False), "BIGSPENDER": (50000, True)}
        assert breakdown.discount == 100000

    def test_ineligible_automatic_discount_not_reported(self, items):
        breakdown = PricingEngine().price(items)
        assert breakdown.coupons == ()
        assert breakdown.rejected_coupons == ()

    def test_free_shipping(self):
        items = _items((60000, 1))
        breakdown = PricingEngine().price(items, shipping_method="express", coupon_codes=["FREESHIP"])
        assert breakdown.shipping == 15000
        assert breakdown.discount == 15000

    def test_free_shipping_leaves_tax_on_merchandise(self):
        items = _items((60000, 1))
        plain = PricingEngine().price(items, shipping_method="express")
        free = PricingEngine().price(items, shipping_method="express", coupon_codes=["FREESHIP"])
        assert free.tax == plain.tax
        assert free.total == plain.total - 15000

    def test_buy_two_get_one(self):
        items = _items((1000, 3), (500, 2))
        breakdown = PricingEngine().price(items, coupon_codes=["BUY2GET1"])
        assert breakdown.discount == 1000

    def test_discounts_never_exceed_subtotal(self, items):
        catalog = InMemoryCouponCatalog(
            [
                Coupon(code="BIG1", discount_type=DiscountType.FIXED.value, value=1000),
                Coupon(code="BIG2", discount_type=DiscountType.FIXED.value, value=1000),
            ]
        )
        breakdown = PricingEngine(catalog=catalog).price(items, coupon_codes=["BIG1", "BIG2"])
        assert breakdown.discount == 1300
        assert [outcome.amount for outcome in breakdown.coupons] == [1000, 300]
        assert breakdown.tax == 0

    def test_expired_coupon_rejected(self, items):
        catalog = InMemoryCouponCatalog(
            [
                Coupon(
                    code="OLD",
                    discount_type=DiscountType.FIXED.value,
                    value=100,
                    expires_at=datetime(2020, 1, 1, tzinfo=UTC),
                )
            ]
        )
        breakdown = PricingEngine(catalog=catalog).price(items, coupon_codes=["OLD"])
        assert breakdown.discount == 0
        assert breakdown.rejected_coupons[0].reason == "Coupon has expired"


class TestCheckCoupon:
    def test_already_applied(self, items):
        outcome = PricingEngine().check_coupon("WELCOME10", items, applied_codes=["WELCOME10"])
        assert outcome.applied is False
        assert outcome.reason == "Coupon already applied"

    def test_automatic_discount_cannot_be_redeemed_by_code(self, items):
        outcome = PricingEngine().check_coupon("BIGSPENDER", items)
        assert outcome.reason == "Invalid coupon code"

    def test_eligible_coupon(self, items):
        outcome = PricingEngine().check_coupon("WELCOME10", items)
        assert outcome.applied is True
        assert outcome.amount == 130


class TestBreakdownDict:
    def test_formatted_amounts(self, items, flat_catalog):
        data = PricingEngine(catalog=flat_catalog).price(items, coupon_codes=["FLAT1"]).to_dict()
        assert data["subtotal"] == {"amount": 1300, "formatted": "₹13.00"}
        assert data["total"]["amount"] == 1416
        assert data["coupons"] == [{"code": "FLAT1", "amount": {"amount": 100, "formatted": "₹1.00"}, "automatic": False}]
