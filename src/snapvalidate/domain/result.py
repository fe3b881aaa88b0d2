"""Result and SchemaResult: the unit every rule produces and consumes.

INVARIANT: ``Result.failed()`` always attaches at least one message.
``valid`` may still be forced False with no errors while a Result is being
assembled, so ``valid == (not errors)`` is a convention, not a constraint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Result(BaseModel):
    """Outcome of one rule, one engine run, or one field.

    Attributes:
        valid: Whether validation passed.
        errors: Human-readable messages, in the order their rules ran.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def passed(cls) -> Result:
        return cls(valid=True)

    @classmethod
    def failed(cls, message: str, *more: str) -> Result:
        """A failing Result carrying *message* and any further messages."""
        return cls(valid=False, errors=[message, *more])

    def add_error(self, message: str) -> Result:
        """Append *message*, mark the result invalid, and return self."""
        self.errors.append(message)
        self.valid = False
        return self

    def merge(self, other: Result) -> Result:
        """Fold a failing *other* into this result. Passing results are ignored."""
        if not other.valid:
            self.valid = False
            self.errors.extend(other.errors)
        return self


class SchemaResult(BaseModel):
    """Aggregate of per-field Results from one schema validation.

    ``per_field`` preserves schema order.
    """

    valid: bool
    per_field: dict[str, Result] = Field(default_factory=dict)

    def errors_by_field(self) -> dict[str, list[str]]:
        """Map each failing field to its messages. Passing fields are omitted."""
        return {
            field: list(result.errors)
            for field, result in self.per_field.items()
            if not result.valid
        }
