"""Assembles the final order payload from a fully completed checkout session."""

from dataclasses import dataclass

from checkout.errors import IncompleteCheckoutError
from checkout.session.details import address_values
from checkout.session.steps import DATA_STEPS


@dataclass(frozen=True)
class OrderSubmission:
    """Immutable payload handed to the order-submission boundary.

    The payment method is summarized and masked; no card number, CVV or
    account password is ever part of it. A requested account carries only
    the email the order service invites the shopper with.
    """

    session_id: str
    customer: dict
    shipping_address: dict
    billing_address: dict
    payment_method: dict
    items: tuple
    flags: dict
    shipping: dict
    totals: object | None = None
    account: dict | None = None

    def to_dict(self) -> dict:
        data = {
            "session_id": self.session_id,
            "customer": dict(self.customer),
            "shipping_address": dict(self.shipping_address),
            "billing_address": dict(self.billing_address),
            "payment_method": dict(self.payment_method),
            "items": [dict(item) for item in self.items],
            "flags": dict(self.flags),
            "shipping": dict(self.shipping),
        }
        if self.totals is not None:
            data["totals"] = self.totals.to_dict()
        if self.account is not None:
            data["account"] = dict(self.account)
        return data


def _payment_summary(payment) -> dict:
    summary = {"method": payment.method, "display": payment.display}
    for name in ("card_brand", "card_last4", "upi_id", "bank_code", "wallet_provider", "tenure"):
        value = getattr(payment, name)
        if value is not None:
            summary[name] = value
    return summary


def assemble_order(session, totals=None) -> OrderSubmission:
    """Merge every step's data and the cart into an ``OrderSubmission``.

    Raises:
        IncompleteCheckoutError: if contact, shipping, billing or payment is not completed.
    """
    missing = [step for step in DATA_STEPS if step not in session.completed]
    if missing:
        raise IncompleteCheckoutError(f"Checkout is incomplete; missing steps: {', '.join(missing)}")

    contact = session.contact
    shipping = session.shipping
    billing = session.billing

    billing_address = address_values(shipping.address if billing.same_as_shipping else billing.address)
    if billing.company_name:
        billing_address["company_name"] = billing.company_name
    if billing.tax_id:
        billing_address["tax_id"] = billing.tax_id

    return OrderSubmission(
        session_id=str(session.id),
        customer={
            "first_name": contact.first_name,
            "last_name": contact.last_name,
            "email": contact.email,
            "phone": contact.phone,
            "alternate_phone": contact.alternate_phone,
        },
        shipping_address=address_values(shipping.address),
        billing_address=billing_address,
        payment_method=_payment_summary(session.payment),
        items=tuple(item.as_dict() for item in session.line_items),
        flags={
            "newsletter": bool(contact.newsletter),
            "whatsapp_updates": bool(contact.whatsapp_updates),
            "sms_updates": bool(contact.sms_updates),
            "create_account": bool(contact.create_account),
            "gift_wrap": bool(shipping.gift_wrap),
        },
        shipping={
            "method": shipping.shipping_method,
            "delivery_instructions": shipping.delivery_instructions,
            "gift_message": shipping.gift_message,
        },
        totals=totals,
        account={"email": contact.email} if contact.create_account else None,
    )
