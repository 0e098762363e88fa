"""Checkout bounded context: guest checkout orchestration.

Collects contact, shipping, billing and payment details across sequential
steps, validates every field against regional rules, prices the order and
hands the assembled payload to the order-submission boundary.
"""

import structlog
from protean.domain import Domain

from checkout.config import get_settings
from checkout.utils.logging import configure_logging

configure_logging(debug=get_settings().debug)

logger = structlog.get_logger(__name__)

# Domain Composition Root
checkout = Domain(name="checkout")
