"""Entering checkout: command and handler.

A shopper re-entering checkout in the same browsing session resumes from the
stored snapshot; otherwise a fresh session is started from the cart.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from checkout.config import get_settings
from checkout.domain import checkout
from checkout.persistence.adapter import get_persistence
from checkout.session.session import CheckoutSession, SessionStatus

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CheckoutSession")
class StartCheckout:
    """Open (or resume) checkout for a browsing session."""

    session_key = String(required=True, max_length=255)
    cart_items = Text()  # JSON: list of {product_id, title, unit_price, quantity, original_price}


@checkout.command_handler(part_of=CheckoutSession)
class StartCheckoutHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        persistence = get_persistence()

        restored = persistence.restore(command.session_key)
        if restored is not None:
            try:
                session = repo.get(restored.id)
            except ObjectNotFoundError:
                # Process restarted: the snapshot is all that is left
                repo.add(restored)
                session = restored

            if session.status == SessionStatus.ACTIVE.value:
                logger.info(
                    "Checkout resumed",
                    session_id=str(session.id),
                    current_step=session.current_step,
                )
                return str(session.id)

        settings = get_settings()
        cart_items = json.loads(command.cart_items) if command.cart_items else []
        session = CheckoutSession.start(
            session_key=command.session_key,
            cart_items=cart_items,
            currency=settings.currency,
            region=settings.region,
        )
        repo.add(session)
        persistence.save(session)

        logger.info("Checkout started", session_id=str(session.id), items=len(cart_items))
        return str(session.id)
