"""Checkout cancellation: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.payment.processor import get_processor
from checkout.persistence.adapter import get_persistence
from checkout.session.session import CheckoutSession

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CheckoutSession")
class CancelCheckout:
    session_id = Identifier(required=True)


@checkout.command_handler(part_of=CheckoutSession)
class CancelCheckoutHandler:
    @handle(CancelCheckout)
    def cancel_checkout(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.cancel()
        repo.add(session)

        processor = get_processor()
        processor.abort(command.session_id)
        processor.discard(command.session_id)
        get_persistence().discard(session.session_key)

        logger.info("Checkout cancelled", session_id=command.session_id, step=session.current_step)
