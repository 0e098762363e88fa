"""Order submission adapter abstraction: pluggable order service integration."""

from checkout.config import get_settings

_submitter_instance = None


def get_submitter():
    """Return the configured order submitter (singleton).

    ``CHECKOUT_ORDER_SUBMITTER`` names the adapter; only ``fake`` ships with
    the checkout.
    """
    global _submitter_instance
    if _submitter_instance is None:
        adapter = get_settings().order_submitter
        if adapter == "fake":
            from checkout.submission.fake_adapter import FakeOrderSubmitter

            _submitter_instance = FakeOrderSubmitter()
        else:
            raise ValueError(f"Unknown order submitter: {adapter}")
    return _submitter_instance


def set_submitter(submitter) -> None:
    global _submitter_instance
    _submitter_instance = submitter


def reset_submitter():
    """Reset the submitter singleton (useful for testing)."""
    global _submitter_instance
    _submitter_instance = None
