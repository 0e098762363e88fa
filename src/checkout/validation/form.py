"""Touched/error bookkeeping for one checkout form."""

from dataclasses import dataclass, field
from typing import Any

from checkout.validation.result import ValidationContext
from checkout.validation.rules import validate, validate_fields


@dataclass
class FormState:
    """Values, touched flags and errors for the fields of a single step.

    A field is validated when it loses focus (``blur``). Once touched, every
    change re-validates it and clears its error the moment it becomes valid.
    ``submit`` touches every required field so that latent errors surface.
    """

    context: ValidationContext = field(default_factory=ValidationContext)
    values: dict[str, Any] = field(default_factory=dict)
    touched: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)

    def _check(self, name: str) -> None:
        result = validate(name, self.values.get(name), self.context.with_values(self.values))
        if result.valid:
            self.errors.pop(name, None)
        else:
            self.errors[name] = result.message

    def change(self, name: str, value: Any) -> None:
        self.values[name] = value
        if name in self.touched:
            self._check(name)

    def blur(self, name: str) -> None:
        self.touched.add(name)
        self._check(name)

    def submit(self, fields) -> bool:
        """Validate ``fields`` in bulk; return True when the form may advance."""
        fields = list(fields)
        self.touched.update(fields)
        errors = validate_fields(self.values, fields, self.context)
        for name in fields:
            if name in errors:
                self.errors[name] = errors[name]
            else:
                self.errors.pop(name, None)
        return not errors

    def reset(self, fields) -> None:
        """Forget the values, touched flags and errors of ``fields`` only."""
        for name in fields:
            self.values.pop(name, None)
            self.touched.discard(name)
            self.errors.pop(name, None)

    @property
    def is_valid(self) -> bool:
        return not self.errors
