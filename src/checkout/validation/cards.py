"""Payment card helpers: normalization, Luhn checksum, brand detection, masking."""

import re

AMEX = "American Express"

# Order matters: Discover's 6011/65 prefixes must win over RuPay's 60
_BRAND_PREFIXES = (
    ("Visa", re.compile(r"^4")),
    ("Mastercard", re.compile(r"^5[1-5]")),
    (AMEX, re.compile(r"^3[47]")),
    ("Discover", re.compile(r"^6(?:011|5)")),
    ("RuPay", re.compile(r"^60")),
)


def normalize_card_number(value: str | None) -> str:
    """Strip the grouping spaces a shopper may type between digits."""
    return re.sub(r"\s", "", value or "")


def passes_luhn(number: str) -> bool:
    """Luhn checksum: double every second digit from the right, sum ≡ 0 (mod 10)."""
    if not number.isdigit():
        return False

    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_brand(value: str | None) -> str | None:
    number = normalize_card_number(value)
    if not number:
        return None
    for brand, pattern in _BRAND_PREFIXES:
        if pattern.match(number):
            return brand
    return None


def format_card_number(value: str | None) -> str:
    """Group digits in blocks of four for display while typing."""
    number = normalize_card_number(value)
    return " ".join(number[i : i + 4] for i in range(0, len(number), 4))


def last4(value: str | None) -> str | None:
    number = normalize_card_number(value)
    return number[-4:] if len(number) >= 4 else None


def mask_card_number(value: str | None) -> str | None:
    tail = last4(value)
    return f"•••• {tail}" if tail else None
