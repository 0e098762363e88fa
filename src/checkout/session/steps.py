"""Checkout steps and the rule deciding which of them a shopper may open."""

from enum import Enum


class CheckoutStep(Enum):
    CONTACT = "contact"
    SHIPPING = "shipping"
    BILLING = "billing"
    PAYMENT = "payment"
    REVIEW = "review"


STEP_ORDER = [step.value for step in CheckoutStep]

# Steps that collect data; review only displays and places the order
DATA_STEPS = STEP_ORDER[:-1]


def step_index(step: str) -> int:
    return STEP_ORDER.index(step)


def next_step(step: str) -> str | None:
    index = step_index(step)
    return STEP_ORDER[index + 1] if index + 1 < len(STEP_ORDER) else None


def previous_step(step: str) -> str | None:
    index = step_index(step)
    return STEP_ORDER[index - 1] if index > 0 else None


def is_step_accessible(target: str, current: str, completed) -> bool:
    """Whether ``target`` may be opened from ``current``.

    The current step is always accessible. Earlier steps are accessible once
    completed, and the step right after the current one only when the current
    step is itself completed. Everything else is out of reach.
    """
    if target not in STEP_ORDER:
        return False

    target_index = step_index(target)
    current_index = step_index(current)

    if target_index == current_index:
        return True
    if target_index < current_index:
        return target in completed
    if target_index == current_index + 1:
        return current in completed
    return False
