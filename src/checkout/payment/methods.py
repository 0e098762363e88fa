"""Payment method registry.

Each payment method declares the fields the shopper must fill in, which of
those fields may never leave memory, how the payment is confirmed, and any
fee it adds to the order.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from checkout.payment.options import BANKS, WALLETS
from checkout.validation.result import ValidationContext
from checkout.validation.rules import validate_fields


class PaymentMethod(Enum):
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"
    WALLET = "wallet"
    EMI = "emi"
    COD = "cod"


class ConfirmationMode(Enum):
    IMMEDIATE = "immediate"  # Gateway answers success/failure synchronously
    ASYNCHRONOUS = "asynchronous"  # Shopper approves out of band within a wait window
    DEFERRED = "deferred"  # Settled in the real world, e.g. cash on delivery


@dataclass(frozen=True)
class PaymentMethodSpec:
    id: str
    name: str
    required_fields: tuple[str, ...] = ()
    sensitive_fields: tuple[str, ...] = ()
    confirmation: ConfirmationMode = ConfirmationMode.IMMEDIATE
    fee_setting: str | None = None
    fee_label: str | None = None

    @property
    def has_wait_window(self) -> bool:
        return self.confirmation == ConfirmationMode.ASYNCHRONOUS

    def wait_window(self, settings) -> float | None:
        return settings.upi_wait_window_seconds if self.has_wait_window else None

    def validate(self, values: Mapping[str, Any], context: ValidationContext | None = None) -> dict[str, str]:
        return validate_fields(values, self.required_fields, context)

    def display(self, values: Mapping[str, Any]) -> str:
        """Human-readable summary of a selection for the review step."""
        method = PaymentMethod(self.id)
        if method == PaymentMethod.CARD:
            return f"{values.get('card_brand') or 'Card'} ending in {values.get('card_last4')}"
        if method == PaymentMethod.UPI:
            return f"UPI: {values.get('upi_id')}"
        if method == PaymentMethod.NETBANKING:
            return f"Net Banking: {BANKS.get(values.get('bank_code'), values.get('bank_code'))}"
        if method == PaymentMethod.WALLET:
            return f"{WALLETS.get(values.get('wallet_provider'), values.get('wallet_provider'))} Wallet"
        if method == PaymentMethod.EMI:
            return f"EMI: {BANKS.get(values.get('bank_code'), values.get('bank_code'))}"
        return self.name


class PaymentMethodRegistry:
    def __init__(self, specs=()) -> None:
        self._specs: dict[str, PaymentMethodSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: PaymentMethodSpec) -> None:
        self._specs[spec.id] = spec

    def get(self, method_id: str | None) -> PaymentMethodSpec | None:
        return self._specs.get(method_id or "")

    def all(self) -> list[PaymentMethodSpec]:
        return list(self._specs.values())

    def __contains__(self, method_id) -> bool:
        return method_id in self._specs


registry = PaymentMethodRegistry(
    [
        PaymentMethodSpec(
            id=PaymentMethod.CARD.value,
            name="Credit/Debit Card",
            required_fields=("card_number", "cardholder_name", "expiry_month", "expiry_year", "cvv"),
            sensitive_fields=("card_number", "cvv"),
        ),
        PaymentMethodSpec(
            id=PaymentMethod.UPI.value,
            name="UPI",
            required_fields=("upi_id",),
            confirmation=ConfirmationMode.ASYNCHRONOUS,
        ),
        PaymentMethodSpec(
            id=PaymentMethod.NETBANKING.value,
            name="Net Banking",
            required_fields=("bank_code",),
        ),
        PaymentMethodSpec(
            id=PaymentMethod.WALLET.value,
            name="Wallet",
            required_fields=("wallet_provider",),
        ),
        PaymentMethodSpec(
            id=PaymentMethod.EMI.value,
            name="EMI",
            required_fields=("bank_code", "tenure"),
        ),
        PaymentMethodSpec(
            id=PaymentMethod.COD.value,
            name="Cash on Delivery",
            confirmation=ConfirmationMode.DEFERRED,
            fee_setting="cod_fee",
            fee_label="Cash handling fee",
        ),
    ]
)


def get_method_spec(method_id: str | None) -> PaymentMethodSpec | None:
    return registry.get(method_id)


def switch_method(form, previous: str | None, selected: str) -> None:
    """Select another method on a payment ``FormState``.

    Only the previously selected method's values and errors are discarded.
    """
    spec = get_method_spec(previous)
    if spec and previous != selected:
        form.reset(spec.required_fields)
    form.values["method"] = selected
