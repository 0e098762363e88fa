"""Payment follow-up: confirm, retry and abort commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.payment.processor import get_processor
from checkout.session.placement import awaiting_confirmation, submit_order
from checkout.session.session import CheckoutSession

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CheckoutSession")
class ConfirmPayment:
    """Check on a payment awaiting out-of-band confirmation (UPI collect request)."""

    session_id = Identifier(required=True)


@checkout.command(part_of="CheckoutSession")
class RetryPayment:
    """Discard the last payment attempt so the order can be placed again."""

    session_id = Identifier(required=True)


@checkout.command(part_of="CheckoutSession")
class AbortPayment:
    session_id = Identifier(required=True)


@checkout.command_handler(part_of=CheckoutSession)
class PaymentFollowUpHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.ensure_active()

        result = get_processor().confirm(command.session_id)
        result.raise_for_failure()

        if result.is_pending:
            return awaiting_confirmation(session, result)
        return submit_order(session, result)

    @handle(RetryPayment)
    def retry_payment(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        session.ensure_active()

        get_processor().retry(command.session_id)
        return session.current_step

    @handle(AbortPayment)
    def abort_payment(self, command):
        result = get_processor().abort(command.session_id)
        logger.info("Payment aborted", session_id=command.session_id)
        return result.to_dict() if result else None
