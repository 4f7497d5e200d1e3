"""
Schema Validation

DESIGN DECISION: Every payload entering a service goes through one of the
functions below. They either return a parsed pydantic model or raise
ValidationError with field-level issues.

The raw pydantic error is kept on the exception (raw_error and __cause__)
so callers that want the library's full detail can still reach it, while
everyone else works with the normalized issue list.

IMPORTANT: Validation NEVER silently fixes input.
It reports problems for the user to correct and resubmit.
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.models.transaction import CreateTransactionSchema
from src.models.user_settings import UpdateUserCurrencySchema


class ValidationIssue(BaseModel):
    """A single field-level problem."""

    field: str = Field(
        ...,
        description="Dotted path of the offending field"
    )
    issue_type: str = Field(
        ...,
        description="Machine-readable kind (e.g., 'missing', 'finite_number', 'enum')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationError(Exception):
    """Payload failed schema validation. Never retried automatically."""

    def __init__(
        self,
        issues: list[ValidationIssue],
        raw_error: Optional[Exception] = None,
    ):
        self.issues = issues
        self.raw_error = raw_error
        summary = "; ".join(f"{i.field}: {i.message}" for i in issues)
        super().__init__(f"Invalid payload ({summary})" if summary else "Invalid payload")

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> "ValidationError":
        issues = []
        for detail in error.errors():
            loc = ".".join(str(part) for part in detail.get("loc", ())) or "payload"
            issues.append(ValidationIssue(
                field=loc,
                issue_type=detail.get("type", "invalid"),
                message=detail.get("msg", "Invalid value"),
            ))
        return cls(issues, raw_error=error)

    @classmethod
    def for_field(cls, field: str, issue_type: str, message: str) -> "ValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])

    @property
    def field_errors(self) -> dict[str, str]:
        """First message per field, the shape a form displays."""
        errors: dict[str, str] = {}
        for issue in self.issues:
            errors.setdefault(issue.field.split(".")[0], issue.message)
        return errors

    def issues_as_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


def validate_create_transaction(payload: Any) -> CreateTransactionSchema:
    """
    Parse a transaction payload.

    Accepts a mapping or an already-built schema instance.
    """
    if isinstance(payload, CreateTransactionSchema):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError.for_field(
            "payload", "model_type", "Transaction payload must be an object"
        )
    try:
        return CreateTransactionSchema.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def validate_update_currency(currency: Any) -> UpdateUserCurrencySchema:
    """Parse a currency code against the supported list."""
    try:
        return UpdateUserCurrencySchema.model_validate({"currency": currency})
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e
