"""Order placement from the review step: command and handler.

Placing an order prices the session, assembles the order payload, takes
payment and hands the order to the submission boundary. A failed payment or
an unreachable order service leaves the session intact for a retry; a
submitted order discards the stored session.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.payment.processor import get_processor
from checkout.persistence.adapter import get_persistence
from checkout.pricing.engine import PricingEngine
from checkout.review.assembler import assemble_order
from checkout.session.session import CheckoutSession
from checkout.session.steps import CheckoutStep
from checkout.submission import get_submitter

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CheckoutSession")
class PlaceOrder:
    """Place the order for a checkout whose data steps are all complete."""

    session_id = Identifier(required=True)


def submit_order(session, payment_result) -> dict:
    """Hand a paid (or pay-on-delivery) order to the submission boundary and close the session."""
    totals = session.price(PricingEngine())
    order = assemble_order(session, totals)

    payload = order.to_dict()
    payload["payment"] = payment_result.to_dict()
    order_id = get_submitter().submit(payload)

    session.mark_submitted(order_id, payment_result.status.value, totals)
    current_domain.repository_for(CheckoutSession).add(session)

    get_persistence().discard(session.session_key)
    get_processor().discard(str(session.id))

    logger.info(
        "Order submitted",
        session_id=str(session.id),
        order_id=order_id,
        total=totals.total,
        payment_status=payment_result.status.value,
    )
    return {
        "status": "submitted",
        "order_id": order_id,
        "payment": payment_result.to_dict(),
        "totals": totals.to_dict(),
    }


def awaiting_confirmation(session, payment_result) -> dict:
    return {
        "status": "awaiting_confirmation",
        "order_id": None,
        "payment": payment_result.to_dict(),
        "totals": session.price(PricingEngine()).to_dict(),
    }


@checkout.command_handler(part_of=CheckoutSession)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.ensure_active()

        totals = session.price(PricingEngine())
        # Rejects an incomplete checkout before any money moves
        assemble_order(session, totals)
        if session.current_step != CheckoutStep.REVIEW.value:
            raise ValidationError({"current_step": ["Return to the review step to place the order"]})

        result = get_processor().charge(
            session_id=command.session_id,
            method=session.payment.method,
            amount=totals.total,
            currency=totals.currency,
            order_reference=command.session_id,
            last4=session.payment.card_last4,
        )
        result.raise_for_failure()

        if result.is_pending and result.payment_id:
            return awaiting_confirmation(session, result)
        return submit_order(session, result)
