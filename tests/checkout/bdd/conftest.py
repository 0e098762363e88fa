"""Shared BDD fixtures and step definitions for checkout."""

import pytest
from checkout.session.events import (
    CheckoutCancelled,
    CheckoutStarted,
    CouponApplied,
    CouponRemoved,
    StepCompleted,
)
from checkout.session.session import CheckoutSession
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup
_EVENT_CLASSES = {
    "CheckoutStarted": CheckoutStarted,
    "StepCompleted": StepCompleted,
    "CouponApplied": CouponApplied,
    "CouponRemoved": CouponRemoved,
    "CheckoutCancelled": CheckoutCancelled,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a new checkout", target_fixture="session")
def new_checkout(cart_items):
    session = CheckoutSession.start(session_key="browser-001", cart_items=cart_items)
    session._events.clear()
    return session


@given("a checkout at the shipping step", target_fixture="session")
def checkout_at_shipping(cart_items, contact_data):
    session = CheckoutSession.start(session_key="browser-001", cart_items=cart_items)
    session.submit_step("contact", contact_data)
    session._events.clear()
    return session


@given("a checkout at the payment step", target_fixture="session")
def checkout_at_payment(cart_items, contact_data, shipping_data, billing_data):
    session = CheckoutSession.start(session_key="browser-001", cart_items=cart_items)
    session.submit_step("contact", contact_data)
    session.submit_step("shipping", shipping_data)
    session.submit_step("billing", billing_data)
    session._events.clear()
    return session


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the current step is "{step}"'))
def current_step_is(session, step):
    assert session.current_step == step


@then(parsers.cfparse('the completed steps are "{steps}"'))
def completed_steps_are(session, steps):
    assert session.completed == [step.strip() for step in steps.split(",")]


@then("no steps are completed")
def no_steps_completed(session):
    assert session.completed == []


@then(parsers.cfparse("a {event_type} event is raised"))
def generic_event_raised(session, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in session._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in session._events]}"
