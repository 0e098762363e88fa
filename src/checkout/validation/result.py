"""Result and context types shared by every field rule."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any


@dataclass(frozen=True)
class FieldResult:
    """Outcome of validating a single field value."""

    valid: bool
    message: str | None = None

    @classmethod
    def error(cls, message: str) -> "FieldResult":
        return cls(valid=False, message=message)


VALID = FieldResult(valid=True)


@dataclass(frozen=True)
class ValidationContext:
    """Everything a rule may look at besides the value itself.

    ``values`` holds the sibling fields of the form being validated, so that
    cross-field rules (expiry month/year, CVV length by card brand, password
    confirmation) can see them without any hidden state.
    """

    region: str = "IN"
    values: Mapping[str, Any] = field(default_factory=dict)
    today: date | None = None

    def sibling(self, name: str) -> Any:
        return self.values.get(name)

    def current_date(self) -> date:
        return self.today or date.today()

    def with_values(self, values: Mapping[str, Any]) -> "ValidationContext":
        return replace(self, values=values)
