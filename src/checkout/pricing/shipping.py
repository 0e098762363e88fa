"""Shipping methods: the single price table for the shipping step and pricing.

Prices are in minor units of the checkout currency.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ShippingMethod:
    id: str
    name: str
    description: str
    min_days: int
    max_days: int
    price: int
    is_express: bool = False

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def estimated_days(self) -> str:
        if self.min_days == self.max_days:
            return f"{self.min_days} business day" + ("s" if self.min_days != 1 else "")
        return f"{self.min_days}-{self.max_days} business days"


SHIPPING_METHODS = {
    method.id: method
    for method in (
        ShippingMethod(
            id="standard",
            name="Standard Shipping",
            description="Delivery in 5-7 business days",
            min_days=5,
            max_days=7,
            price=0,
        ),
        ShippingMethod(
            id="express",
            name="Express Shipping",
            description="Delivery in 2-3 business days",
            min_days=2,
            max_days=3,
            price=15000,
            is_express=True,
        ),
        ShippingMethod(
            id="overnight",
            name="Overnight Shipping",
            description="Next business day delivery",
            min_days=1,
            max_days=1,
            price=30000,
            is_express=True,
        ),
    )
}


def get_shipping_method(method_id: str | None) -> ShippingMethod | None:
    return SHIPPING_METHODS.get(method_id or "")


def shipping_price(method_id: str | None) -> int:
    """Price of a shipping method in minor units; unknown or unset methods cost nothing."""
    method = get_shipping_method(method_id)
    return method.price if method else 0
