"""Moving through checkout: step submission and navigation commands."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.errors import StepSequenceError
from checkout.persistence.adapter import get_persistence
from checkout.session.session import CheckoutSession
from checkout.session.steps import CheckoutStep

logger = structlog.get_logger(__name__)


@checkout.command(part_of="CheckoutSession")
class SubmitStep:
    """Submit the fields of one checkout step."""

    session_id = Identifier(required=True)
    step = String(required=True, choices=CheckoutStep)
    data = Text(required=True)  # JSON object: field name -> value


@checkout.command(part_of="CheckoutSession")
class NavigateToStep:
    session_id = Identifier(required=True)
    step = String(required=True, choices=CheckoutStep)


@checkout.command_handler(part_of=CheckoutSession)
class CheckoutProgressHandler:
    @handle(SubmitStep)
    def submit_step(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)

        try:
            following = session.submit_step(command.step, json.loads(command.data))
        except StepSequenceError as exc:
            logger.info(
                "Step submission ignored",
                session_id=command.session_id,
                step=exc.target,
                current_step=exc.current,
            )
            return session.current_step

        repo.add(session)
        get_persistence().save(session)

        logger.info("Checkout step completed", session_id=command.session_id, step=command.step)
        return following

    @handle(NavigateToStep)
    def navigate_to_step(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)

        previous = session.current_step
        if not session.navigate_to(command.step):
            return False

        if session.current_step != previous:
            repo.add(session)
            get_persistence().save(session)
        return True
