"""Coupon catalog port, in-memory adapter and factory.

Provides get_catalog() / set_catalog() so the coupon source can be swapped
(a promotions service in production, a seeded in-memory catalog in
development and tests).
"""

from abc import ABC, abstractmethod

from checkout.pricing.coupons import Coupon, DiscountType


class CouponCatalog(ABC):
    """Where coupons are looked up by code."""

    @abstractmethod
    def find(self, code: str) -> Coupon | None:
        """Return the coupon for an (upper-cased) code, or None."""
        ...

    @abstractmethod
    def automatic_discounts(self) -> list[Coupon]:
        """Coupons applied without a code whenever the order qualifies."""
        ...


class InMemoryCouponCatalog(CouponCatalog):
    def __init__(self, coupons=None) -> None:
        self._coupons: dict[str, Coupon] = {}
        for coupon in coupons if coupons is not None else default_coupons():
            self.add(coupon)

    def add(self, coupon: Coupon) -> None:
        self._coupons[coupon.code.upper()] = coupon

    def find(self, code: str) -> Coupon | None:
        coupon = self._coupons.get((code or "").upper())
        if coupon is None or coupon.automatic:
            return None
        return coupon

    def automatic_discounts(self) -> list[Coupon]:
        return [coupon for coupon in self._coupons.values() if coupon.automatic]


def default_coupons() -> list[Coupon]:
    return [
        Coupon(
            code="WELCOME10",
            description="10% off your first order, up to ₹500",
            discount_type=DiscountType.PERCENTAGE.value,
            value=10,
            maximum_discount=50000,
        ),
        Coupon(
            code="FLAT100",
            description="₹100 off orders above ₹999",
            discount_type=DiscountType.FIXED.value,
            value=10000,
            minimum_amount=99900,
        ),
        Coupon(
            code="FREESHIP",
            description="Free shipping on orders above ₹499",
            discount_type=DiscountType.SHIPPING.value,
            minimum_amount=49900,
        ),
        Coupon(
            code="BUY2GET1",
            description="Buy 2, get 1 free on every line",
            discount_type=DiscountType.BUY_X_GET_Y.value,
            buy_quantity=2,
            get_quantity=1,
        ),
        Coupon(
            code="BIGSPENDER",
            description="5% off orders above ₹10,000, up to ₹1,000",
            discount_type=DiscountType.PERCENTAGE.value,
            value=5,
            minimum_amount=1000000,
            maximum_discount=100000,
            automatic=True,
        ),
    ]


_current_catalog: CouponCatalog | None = None


def get_catalog() -> CouponCatalog:
    """Return the active coupon catalog. Defaults to the seeded in-memory catalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCouponCatalog()
    return _current_catalog


def set_catalog(catalog: CouponCatalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
