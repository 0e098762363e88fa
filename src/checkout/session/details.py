"""Value objects holding what each checkout step collected.

Step data arrives as a flat mapping of field names (the same names the field
rules use). ``StepForm`` knows, per step, which fields must be validated for
a given submission and how to turn the validated mapping into the step's
value object.
"""

from protean.fields import Boolean, Integer, String, ValueObject

from checkout.domain import checkout
from checkout.payment.methods import get_method_spec
from checkout.session.steps import CheckoutStep
from checkout.validation.cards import detect_brand, last4, normalize_card_number

ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "country",
    "phone",
)

DEFAULT_COUNTRY = "India"

# Held in memory only; stripped from snapshots and form pre-fills
SENSITIVE_FIELDS = {
    "contact": ("password",),
    "payment": ("card_number", "cvv"),
}


@checkout.value_object(part_of="CheckoutSession")
class Address:
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    address_line1: String(required=True, max_length=200)
    address_line2: String(max_length=200)
    city: String(required=True, max_length=50)
    state: String(required=True, max_length=100)
    postal_code: String(required=True, max_length=10)
    country: String(max_length=100, default=DEFAULT_COUNTRY)
    phone: String(required=True, max_length=20)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@checkout.value_object(part_of="CheckoutSession")
class ContactDetails:
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    email: String(required=True, max_length=254)
    phone: String(required=True, max_length=20)
    alternate_phone: String(max_length=20)
    newsletter: Boolean(default=False)
    whatsapp_updates: Boolean(default=False)
    sms_updates: Boolean(default=False)
    create_account: Boolean(default=False)
    password: String(max_length=128)  # Never persisted


@checkout.value_object(part_of="CheckoutSession")
class ShippingDetails:
    address: ValueObject(Address, required=True)
    shipping_method: String(required=True, max_length=50)
    delivery_instructions: String(max_length=500)
    gift_wrap: Boolean(default=False)
    gift_message: String(max_length=250)


@checkout.value_object(part_of="CheckoutSession")
class BillingDetails:
    same_as_shipping: Boolean(default=True)
    address: ValueObject(Address)
    company_name: String(max_length=100)
    tax_id: String(max_length=15)


@checkout.value_object(part_of="CheckoutSession")
class PaymentSelection:
    """The chosen payment method and only that method's details.

    ``card_number`` and ``cvv`` live in memory for the life of the session
    and are stripped from every snapshot; brand and last four are kept.
    """

    method: String(required=True, max_length=20)
    card_number: String(max_length=19)
    cvv: String(max_length=4)
    card_brand: String(max_length=50)
    card_last4: String(max_length=4)
    cardholder_name: String(max_length=50)
    expiry_month: String(max_length=2)
    expiry_year: String(max_length=4)
    upi_id: String(max_length=100)
    bank_code: String(max_length=20)
    wallet_provider: String(max_length=20)
    tenure: Integer()

    @property
    def display(self) -> str:
        return get_method_spec(self.method).display(self.to_dict())


def _clean(value):
    if isinstance(value, str):
        value = value.strip()
    return value if value not in ("", None) else None


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def build_address(data) -> Address:
    return Address(
        first_name=_clean(data.get("first_name")),
        last_name=_clean(data.get("last_name")),
        address_line1=_clean(data.get("address_line1")),
        address_line2=_clean(data.get("address_line2")),
        city=_clean(data.get("city")),
        state=_clean(data.get("state")),
        postal_code=_clean(data.get("postal_code")),
        country=_clean(data.get("country")) or DEFAULT_COUNTRY,
        phone=_clean(data.get("phone")),
    )


def address_values(address: Address | None) -> dict:
    """Flatten an address back into form field values."""
    if address is None:
        return {}
    return {name: getattr(address, name) for name in ADDRESS_FIELDS}


class StepForm:
    """Fields to validate and value object to build, for one data step."""

    @staticmethod
    def normalize(step: str, data) -> dict:
        values = dict(data or {})
        if step in (CheckoutStep.SHIPPING.value, CheckoutStep.BILLING.value):
            values.setdefault("country", DEFAULT_COUNTRY)
        if step == CheckoutStep.BILLING.value:
            values["same_as_shipping"] = _flag(values.get("same_as_shipping", True))
        return values

    @staticmethod
    def fields(step: str, values) -> list[str]:
        if step == CheckoutStep.CONTACT.value:
            fields = ["first_name", "last_name", "email", "phone", "alternate_phone"]
            if _flag(values.get("create_account")):
                fields += ["password", "confirm_password"]
            return fields

        if step == CheckoutStep.SHIPPING.value:
            return [*ADDRESS_FIELDS, "shipping_method", "delivery_instructions", "gift_message"]

        if step == CheckoutStep.BILLING.value:
            fields = ["company_name", "tax_id"]
            if not values.get("same_as_shipping"):
                fields = [*ADDRESS_FIELDS, *fields]
            return fields

        if step == CheckoutStep.PAYMENT.value:
            spec = get_method_spec(values.get("method"))
            return list(spec.required_fields) if spec else []

        return []

    @staticmethod
    def extra_errors(step: str, values) -> dict[str, str]:
        """Errors that are not tied to a single field rule."""
        if step == CheckoutStep.PAYMENT.value and get_method_spec(values.get("method")) is None:
            return {"method": "Please select a payment method"}
        return {}

    @staticmethod
    def build(step: str, values):
        if step == CheckoutStep.CONTACT.value:
            create_account = _flag(values.get("create_account"))
            return ContactDetails(
                first_name=_clean(values.get("first_name")),
                last_name=_clean(values.get("last_name")),
                email=_clean(values.get("email")),
                phone=_clean(values.get("phone")),
                alternate_phone=_clean(values.get("alternate_phone")),
                newsletter=_flag(values.get("newsletter")),
                whatsapp_updates=_flag(values.get("whatsapp_updates")),
                sms_updates=_flag(values.get("sms_updates")),
                create_account=create_account,
                password=values.get("password") if create_account else None,
            )

        if step == CheckoutStep.SHIPPING.value:
            gift_wrap = _flag(values.get("gift_wrap"))
            return ShippingDetails(
                address=build_address(values),
                shipping_method=_clean(values.get("shipping_method")),
                delivery_instructions=_clean(values.get("delivery_instructions")),
                gift_wrap=gift_wrap,
                gift_message=_clean(values.get("gift_message")) if gift_wrap else None,
            )

        if step == CheckoutStep.BILLING.value:
            same_as_shipping = values["same_as_shipping"]
            tax_id = _clean(values.get("tax_id"))
            return BillingDetails(
                same_as_shipping=same_as_shipping,
                address=None if same_as_shipping else build_address(values),
                company_name=_clean(values.get("company_name")),
                tax_id=tax_id.upper() if tax_id else None,
            )

        if step == CheckoutStep.PAYMENT.value:
            return build_payment(values)

        raise ValueError(f"{step!r} does not collect data")


def build_payment(values) -> PaymentSelection:
    """Keep only the sub-fields of the selected method."""
    method = values.get("method")
    spec = get_method_spec(method)
    selected = {name: _clean(values.get(name)) for name in spec.required_fields}

    if "card_number" in selected:
        number = normalize_card_number(selected["card_number"])
        selected["card_number"] = number
        selected["card_brand"] = detect_brand(number)
        selected["card_last4"] = last4(number)
    if selected.get("tenure") is not None:
        selected["tenure"] = int(selected["tenure"])
    for name in ("expiry_month", "expiry_year"):
        if selected.get(name) is not None:
            selected[name] = str(selected[name])

    return PaymentSelection(method=method, **selected)
