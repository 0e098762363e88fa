"""Dual-component goods and services tax (CGST + SGST)."""

from dataclasses import dataclass

BASIS_POINTS = 10000


@dataclass(frozen=True)
class TaxComponent:
    name: str
    rate_bps: float
    taxable_base: int
    amount: int

    @property
    def rate_percent(self) -> float:
        return self.rate_bps / 100


@dataclass(frozen=True)
class TaxPolicy:
    """How tax is levied on an order.

    ``rate_bps`` is the combined nominal rate; it is split into two components
    of equal rate. With ``on_discounted_base`` off, coupons reduce the total
    after tax instead of reducing the taxable base.
    """

    rate_bps: int = 1800
    on_discounted_base: bool = True
    component_names: tuple[str, str] = ("CGST", "SGST")

    @classmethod
    def from_settings(cls, settings) -> "TaxPolicy":
        return cls(rate_bps=settings.tax_rate_bps, on_discounted_base=settings.tax_on_discounted_base)

    def taxable_base(self, subtotal: int, discount: int) -> int:
        if self.on_discounted_base:
            return max(subtotal - discount, 0)
        return subtotal


def component_amount(base: int, combined_rate_bps: int) -> int:
    """Half of ``combined_rate_bps`` applied to ``base``, rounded half-up to a minor unit."""
    # base * (rate / 2) / 10000, kept in integers
    return (base * combined_rate_bps + BASIS_POINTS) // (2 * BASIS_POINTS)


def split_tax(base: int, policy: TaxPolicy) -> tuple[TaxComponent, ...]:
    amount = component_amount(base, policy.rate_bps)
    return tuple(
        TaxComponent(name=name, rate_bps=policy.rate_bps / 2, taxable_base=base, amount=amount)
        for name in policy.component_names
    )
