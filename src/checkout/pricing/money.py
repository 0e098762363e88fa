"""Money and LineItem value objects.

Amounts are integers in the currency's minor unit (paise for INR). The
formatted string is derived on demand and is never stored.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Integer, String, ValueObject

from checkout.domain import checkout

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
}


def _group_indian(whole: int) -> str:
    """1234567 -> 12,34,567 (lakh/crore grouping)."""
    digits = str(whole)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_amount(amount: int, currency: str = "INR", decimals: bool = True) -> str:
    """Render minor units for display, e.g. ``format_amount(130000)`` -> ``"₹1,300.00"``."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 100)
    grouped = _group_indian(whole) if currency == "INR" else f"{whole:,}"
    if decimals or fraction:
        return f"{sign}{symbol}{grouped}.{fraction:02d}"
    return f"{sign}{symbol}{grouped}"


@checkout.value_object
class Money:
    """A monetary amount in minor units with its ISO 4217 currency code."""

    amount: Integer(required=True)
    currency: String(max_length=3, default="INR")

    @invariant.post
    def currency_must_be_supported(self):
        if self.currency not in CURRENCY_SYMBOLS:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    @property
    def formatted(self) -> str:
        return format_amount(self.amount, self.currency)

    def _same_currency(self, other):
        if other.currency != self.currency:
            raise ValidationError({"currency": [f"Cannot combine {self.currency} with {other.currency}"]})

    def add(self, other):
        self._same_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def subtract(self, other):
        self._same_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def multiply(self, factor: int):
        return Money(amount=self.amount * factor, currency=self.currency)


@checkout.value_object
class LineItem:
    """A cart line handed over to checkout."""

    product_id: String(max_length=100)
    title: String(max_length=255)
    unit_price: ValueObject(Money, required=True)
    quantity: Integer(required=True, min_value=1)
    original_price: ValueObject(Money)

    @property
    def line_total(self) -> int:
        return self.unit_price.amount * self.quantity

    @property
    def savings(self) -> int:
        """Amount saved against the original price, never negative."""
        if not self.original_price:
            return 0
        return max(self.original_price.amount - self.unit_price.amount, 0) * self.quantity

    @classmethod
    def from_dict(cls, data, currency="INR"):
        original = data.get("original_price")
        return cls(
            product_id=data.get("product_id"),
            title=data.get("title"),
            unit_price=Money(amount=int(data["unit_price"]), currency=currency),
            quantity=int(data["quantity"]),
            original_price=Money(amount=int(original), currency=currency) if original is not None else None,
        )

    def as_dict(self):
        return {
            "product_id": self.product_id,
            "title": self.title,
            "unit_price": self.unit_price.amount,
            "quantity": self.quantity,
            "original_price": self.original_price.amount if self.original_price else None,
        }
