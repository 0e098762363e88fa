"""Domain events for the CheckoutSession aggregate."""

from protean.fields import Identifier, Integer, String, Text

from checkout.domain import checkout


@checkout.event(part_of="CheckoutSession")
class CheckoutStarted:
    """A shopper entered checkout with the items of their cart."""

    __version__ = 1

    session_id = Identifier(required=True)
    session_key = String(required=True)
    item_count = Integer(required=True)


@checkout.event(part_of="CheckoutSession")
class StepCompleted:
    """A checkout step was submitted with valid data."""

    __version__ = 1

    session_id = Identifier(required=True)
    step = String(required=True)
    next_step = String(required=True)


@checkout.event(part_of="CheckoutSession")
class CouponApplied:
    __version__ = 1

    session_id = Identifier(required=True)
    coupon_code = String(required=True)


@checkout.event(part_of="CheckoutSession")
class CouponRemoved:
    __version__ = 1

    session_id = Identifier(required=True)
    coupon_code = String(required=True)


@checkout.event(part_of="CheckoutSession")
class CheckoutCancelled:
    """The shopper abandoned checkout; the session is discarded."""

    __version__ = 1

    session_id = Identifier(required=True)
    step = String(required=True)


@checkout.event(part_of="CheckoutSession")
class OrderSubmitted:
    """The assembled order was accepted by the order-submission boundary."""

    __version__ = 1

    session_id = Identifier(required=True)
    order_id = String(required=True)
    payment_method = String(required=True)
    payment_status = String(required=True)
    total = Integer(required=True)
    currency = String(required=True)
    items = Text(required=True)  # JSON: list of line items
