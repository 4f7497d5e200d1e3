"""Tests for payload validation."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from src.models.transaction import CreateTransactionSchema, TransactionType
from src.models.user_settings import Currency
from src.validation import (
    ValidationError,
    validate_create_transaction,
    validate_update_currency,
)


def valid_payload(**overrides) -> dict:
    payload = {
        "type": "expense",
        "description": "",
        "amount": "42.5",
        "category": "Groceries",
        "date": datetime(2024, 3, 1, tzinfo=timezone.utc),
    }
    payload.update(overrides)
    return payload


class TestValidateCreateTransaction:
    """Tests for validate_create_transaction."""

    def test_valid_mapping(self):
        """Test a valid mapping parses."""
        parsed = validate_create_transaction(valid_payload())
        assert parsed.type == TransactionType.EXPENSE
        assert parsed.amount == Decimal("42.5")

    def test_schema_instance_passes_through(self):
        """Test an already-parsed schema is returned as is."""
        schema = CreateTransactionSchema(**valid_payload())
        assert validate_create_transaction(schema) is schema

    def test_not_a_mapping(self):
        """Test non-object payloads are rejected."""
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(["expense", 42.5])
        assert "payload" in exc.value.field_errors

    def test_nan_amount(self):
        """Test NaN reports an amount error."""
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(valid_payload(amount=float("nan")))
        assert "amount" in exc.value.field_errors

    def test_missing_category(self):
        """Test a missing category is reported on that field."""
        payload = valid_payload()
        del payload["category"]
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(payload)
        assert list(exc.value.field_errors) == ["category"]

    def test_multiple_issues(self):
        """Test every bad field is reported."""
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(valid_payload(type="transfer", amount="abc"))
        assert set(exc.value.field_errors) == {"type", "amount"}

    def test_raw_error_preserved(self):
        """Test the library error stays reachable."""
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(valid_payload(amount="abc"))
        assert isinstance(exc.value.raw_error, PydanticValidationError)
        assert exc.value.__cause__ is exc.value.raw_error

    def test_issues_as_dicts(self):
        """Test the audit-friendly shape."""
        with pytest.raises(ValidationError) as exc:
            validate_create_transaction(valid_payload(amount="abc"))
        issues = exc.value.issues_as_dicts()
        assert issues[0]["field"] == "amount"
        assert set(issues[0]) == {"field", "issue_type", "message"}


class TestValidateUpdateCurrency:
    """Tests for validate_update_currency."""

    def test_supported_code(self):
        """Test a listed code parses."""
        assert validate_update_currency("EUR").currency == Currency.EUR

    def test_unsupported_code(self):
        """Test an unlisted code is a ValidationError on currency."""
        with pytest.raises(ValidationError) as exc:
            validate_update_currency("ZZZ")
        assert "currency" in exc.value.field_errors
        assert isinstance(exc.value.raw_error, PydanticValidationError)

    def test_for_field(self):
        """Test building a single-field error."""
        error = ValidationError.for_field("category", "not_found", "No such category")
        assert error.field_errors == {"category": "No such category"}
        assert error.raw_error is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
