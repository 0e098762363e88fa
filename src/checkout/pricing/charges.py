"""Itemized additional charges (gift wrap, cash handling)."""

from dataclasses import dataclass

from checkout.config import get_settings
from checkout.payment.methods import get_method_spec


@dataclass(frozen=True)
class AdditionalCharge:
    code: str
    label: str
    amount: int


def additional_charges(gift_wrap: bool = False, payment_method: str | None = None, settings=None):
    """Charges that apply to an order with the given options."""
    settings = settings or get_settings()
    charges = []

    if gift_wrap and settings.gift_wrap_fee:
        charges.append(AdditionalCharge(code="gift_wrap", label="Gift wrap", amount=settings.gift_wrap_fee))

    spec = get_method_spec(payment_method) if payment_method else None
    if spec and spec.fee_setting:
        fee = getattr(settings, spec.fee_setting)
        if fee:
            charges.append(AdditionalCharge(code=spec.fee_setting, label=spec.fee_label, amount=fee))

    return charges
