"""Order submission port: where an assembled checkout becomes an order.

The checkout programs against this port; the order service adapter is
swapped via configuration.
"""

from abc import ABC, abstractmethod


class OrderSubmissionPort(ABC):
    """Abstract interface for order submission adapters."""

    @abstractmethod
    def submit(self, payload: dict) -> str:
        """Submit an order payload.

        Returns:
            the order identifier assigned by the order service.

        Raises:
            SubmissionNetworkError: when the order service cannot be reached.
        """
        ...
