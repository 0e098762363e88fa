"""Field rules for every checkout form.

Each rule is a pure function ``(value, context) -> FieldResult``. Rules never
raise for bad input; they report it. ``FIELD_RULES`` maps the field names used
by the checkout steps to their rule, and ``validate`` / ``validate_fields`` are
the call sites used by the session aggregate, the form state and the API.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from checkout.payment.options import BANKS, EMI_TENURES, WALLETS
from checkout.pricing.shipping import SHIPPING_METHODS
from checkout.validation.cards import AMEX, detect_brand, normalize_card_number, passes_luhn
from checkout.validation.regions import REGIONS, get_region, region_for_country
from checkout.validation.result import VALID, FieldResult, ValidationContext

Rule = Callable[[Any, ValidationContext], FieldResult]

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UPI_PATTERN = re.compile(r"^[\w.-]+@[\w.-]+$")
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
CVV_PATTERN = re.compile(r"^\d{3,4}$")
PASSWORD_SPECIAL = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

MAX_EXPIRY_YEARS = 20


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _digits(value: Any) -> str:
    return re.sub(r"\s", "", _text(value))


def _as_int(value: Any) -> int | None:
    try:
        return int(_text(value))
    except ValueError:
        return None


def _region_for(context: ValidationContext):
    # The country entered on the same form wins over the context default
    return region_for_country(context.sibling("country")) or get_region(context.region)


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------
def validate_name(value, context):
    name = _text(value)
    if not name:
        return FieldResult.error("Name is required")
    if len(name) < 2:
        return FieldResult.error("Name must be at least 2 characters")
    if len(name) > 50:
        return FieldResult.error("Name must not exceed 50 characters")
    if not NAME_PATTERN.match(name):
        return FieldResult.error("Name can only contain letters, spaces, hyphens, and apostrophes")
    return VALID


def validate_email(value, context):
    email = _text(value)
    if not email:
        return FieldResult.error("Email is required")
    if not EMAIL_PATTERN.match(email):
        return FieldResult.error("Please enter a valid email address")
    return VALID


def validate_phone(value, context):
    phone = _digits(value)
    if not phone:
        return FieldResult.error("Phone number is required")
    region = _region_for(context)
    if not region.phone_pattern.match(phone):
        return FieldResult.error(region.phone_message)
    return VALID


def validate_alternate_phone(value, context):
    phone = _digits(value)
    if not phone:
        return VALID

    result = validate_phone(phone, context)
    if not result.valid:
        return result
    if phone == _digits(context.sibling("phone")):
        return FieldResult.error("Alternate phone must be different from primary phone")
    return VALID


def validate_password(value, context):
    password = "" if value is None else str(value)
    if not password:
        return FieldResult.error("Password is required")
    if len(password) < 8:
        return FieldResult.error("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        return FieldResult.error("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        return FieldResult.error("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        return FieldResult.error("Password must contain at least one number")
    if not PASSWORD_SPECIAL.search(password):
        return FieldResult.error("Password must contain at least one special character")
    return VALID


def validate_confirm_password(value, context):
    confirmation = "" if value is None else str(value)
    if not confirmation:
        return FieldResult.error("Please confirm your password")
    if confirmation != (context.sibling("password") or ""):
        return FieldResult.error("Passwords do not match")
    return VALID


def password_strength(password: str | None) -> int:
    """Informational 0-100 score shown next to the password field."""
    password = password or ""
    score = 0
    if len(password) >= 8:
        score += 20
    if len(password) >= 12:
        score += 20
    for pattern in (r"[a-z]", r"[A-Z]", r"[0-9]"):
        if re.search(pattern, password):
            score += 15
    if PASSWORD_SPECIAL.search(password):
        score += 15
    return min(score, 100)


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------
def validate_address_line1(value, context):
    line = _text(value)
    if not line:
        return FieldResult.error("Street address is required")
    if len(line) < 5:
        return FieldResult.error("Street address must be at least 5 characters")
    if len(line) > 200:
        return FieldResult.error("Street address must not exceed 200 characters")
    return VALID


def validate_address_line2(value, context):
    if len(_text(value)) > 200:
        return FieldResult.error("Address line 2 must not exceed 200 characters")
    return VALID


def validate_city(value, context):
    city = _text(value)
    if not city:
        return FieldResult.error("City is required")
    if len(city) < 2:
        return FieldResult.error("City must be at least 2 characters")
    if len(city) > 50:
        return FieldResult.error("City must not exceed 50 characters")
    return VALID


def validate_state(value, context):
    state = _text(value)
    if not state:
        return FieldResult.error("Please select a state")
    region = _region_for(context)
    if region.states and state not in region.states:
        return FieldResult.error("Please select a state")
    return VALID


def validate_postal_code(value, context):
    postal_code = _digits(value)
    if not postal_code:
        return FieldResult.error("PIN code is required")
    region = _region_for(context)
    if not region.postal_pattern.match(postal_code):
        return FieldResult.error(region.postal_message)
    return VALID


def validate_country(value, context):
    if region_for_country(_text(value)) is None:
        supported = ", ".join(rules.country_name for rules in REGIONS.values())
        return FieldResult.error(f"We currently ship to {supported} only")
    return VALID


# ---------------------------------------------------------------------------
# Shipping extras
# ---------------------------------------------------------------------------
def validate_shipping_method(value, context):
    if _text(value) not in SHIPPING_METHODS:
        return FieldResult.error("Please select a shipping method")
    return VALID


def validate_delivery_instructions(value, context):
    if len(_text(value)) > 500:
        return FieldResult.error("Delivery instructions must not exceed 500 characters")
    return VALID


def validate_gift_message(value, context):
    if len(_text(value)) > 250:
        return FieldResult.error("Gift message must not exceed 250 characters")
    return VALID


# ---------------------------------------------------------------------------
# Billing extras
# ---------------------------------------------------------------------------
def validate_company_name(value, context):
    company = _text(value)
    if not company:
        return VALID
    if len(company) < 2:
        return FieldResult.error("Company name must be at least 2 characters")
    if len(company) > 100:
        return FieldResult.error("Company name must not exceed 100 characters")
    return VALID


def validate_tax_id(value, context):
    tax_id = _text(value).upper()
    if not tax_id:
        return VALID
    if not GSTIN_PATTERN.match(tax_id):
        return FieldResult.error("Please enter a valid GSTIN (15 characters)")
    return VALID


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------
def validate_card_number(value, context):
    number = normalize_card_number(_text(value))
    if not number:
        return FieldResult.error("Card number is required")
    if not number.isdigit() or not 13 <= len(number) <= 19 or not passes_luhn(number):
        return FieldResult.error("Please enter a valid card number")
    return VALID


def validate_cardholder_name(value, context):
    name = _text(value)
    if not name:
        return FieldResult.error("Cardholder name is required")
    if not 3 <= len(name) <= 50 or not NAME_PATTERN.match(name):
        return FieldResult.error("Name must be 3-50 characters and contain only letters")
    return VALID


def _expiry_year(value: Any) -> int | None:
    year = _as_int(value)
    if year is None:
        return None
    return 2000 + year if year < 100 else year


def validate_expiry_month(value, context):
    month = _as_int(value)
    if month is None or not 1 <= month <= 12:
        return FieldResult.error("Invalid month")

    year = _expiry_year(context.sibling("expiry_year"))
    today = context.current_date()
    if year == today.year and month < today.month:
        return FieldResult.error("Card has expired")
    return VALID


def validate_expiry_year(value, context):
    year = _expiry_year(value)
    today = context.current_date()
    if year is None or not today.year <= year <= today.year + MAX_EXPIRY_YEARS:
        return FieldResult.error("Invalid year")
    return VALID


def validate_cvv(value, context):
    cvv = _text(value)
    if not CVV_PATTERN.match(cvv):
        return FieldResult.error("Please enter a valid CVV")
    expected = 4 if detect_brand(context.sibling("card_number")) == AMEX else 3
    if len(cvv) != expected:
        return FieldResult.error(f"CVV must be {expected} digits")
    return VALID


def validate_upi_id(value, context):
    upi_id = _text(value)
    if not upi_id:
        return FieldResult.error("UPI ID is required")
    if not UPI_PATTERN.match(upi_id):
        return FieldResult.error("Please enter a valid UPI ID (e.g., user@paytm)")
    return VALID


def validate_bank_code(value, context):
    if _text(value) not in BANKS:
        return FieldResult.error("Please select a bank")
    return VALID


def validate_wallet_provider(value, context):
    if _text(value) not in WALLETS:
        return FieldResult.error("Please select a wallet")
    return VALID


def validate_tenure(value, context):
    if _as_int(value) not in EMI_TENURES:
        return FieldResult.error("Please select EMI tenure")
    return VALID


FIELD_RULES: dict[str, Rule] = {
    "first_name": validate_name,
    "last_name": validate_name,
    "email": validate_email,
    "phone": validate_phone,
    "alternate_phone": validate_alternate_phone,
    "password": validate_password,
    "confirm_password": validate_confirm_password,
    "address_line1": validate_address_line1,
    "address_line2": validate_address_line2,
    "city": validate_city,
    "state": validate_state,
    "postal_code": validate_postal_code,
    "country": validate_country,
    "shipping_method": validate_shipping_method,
    "delivery_instructions": validate_delivery_instructions,
    "gift_message": validate_gift_message,
    "company_name": validate_company_name,
    "tax_id": validate_tax_id,
    "card_number": validate_card_number,
    "cardholder_name": validate_cardholder_name,
    "expiry_month": validate_expiry_month,
    "expiry_year": validate_expiry_year,
    "cvv": validate_cvv,
    "upi_id": validate_upi_id,
    "bank_code": validate_bank_code,
    "wallet_provider": validate_wallet_provider,
    "tenure": validate_tenure,
}


def validate(field: str, value: Any, context: ValidationContext | None = None) -> FieldResult:
    """Validate one field value.

    Raises:
        ValueError: if no rule is registered for ``field``.
    """
    try:
        rule = FIELD_RULES[field]
    except KeyError:
        raise ValueError(f"No validation rule for field {field!r}") from None
    return rule(value, context or ValidationContext())


def validate_fields(
    values: Mapping[str, Any],
    fields: Iterable[str],
    context: ValidationContext | None = None,
) -> dict[str, str]:
    """Validate ``fields`` of ``values`` together; return ``{field: message}`` for failures.

    The values themselves are handed to every rule as siblings, so cross-field
    checks (expiry, CVV length, password confirmation) see the same snapshot.
    """
    context = (context or ValidationContext()).with_values(values)
    errors = {}
    for field in fields:
        result = validate(field, values.get(field), context)
        if not result.valid:
            errors[field] = result.message
    return errors
