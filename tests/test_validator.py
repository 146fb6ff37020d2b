"""Tests for boundary validation of user input."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from loan_ledger.ledger import ValidationError
from loan_ledger.models.loan import BorrowerKind, LoanTerm
from loan_ledger.validation import LoanInputValidator


@pytest.fixture
def validator() -> LoanInputValidator:
    return LoanInputValidator()


@pytest.fixture
def raw_terms() -> dict:
    return {
        "borrower_name": "  Somchai  ",
        "borrower_kind": "group",
        "principal": "1,000",
        "total_interest_expected": "100.50",
        "term": "5_MONTHS",
        "start_date": "2024-01-15",
        "repayment_due_day": "5",
    }


class TestParseAmount:
    """Tests for amount parsing."""

    @pytest.mark.parametrize("value, expected", [
        ("1500", Decimal("1500")),
        ("1,500.50", Decimal("1500.50")),
        (0.1, Decimal("0.1")),
        (25, Decimal("25")),
        (Decimal("3.33"), Decimal("3.33")),
    ])
    def test_valid_amounts(self, validator, value, expected):
        """Test common input forms are accepted."""
        assert validator.parse_amount(value) == expected

    @pytest.mark.parametrize("value", ["0", "-10", "abc", "", None, "NaN", "Infinity", True])
    def test_invalid_amounts(self, validator, value):
        """Test zero, negative, non-numeric and non-finite values are rejected."""
        with pytest.raises(ValidationError):
            validator.parse_amount(value)

    def test_zero_allowed_when_asked(self, validator):
        """Test interest may be zero."""
        assert validator.parse_amount("0", allow_zero=True) == Decimal("0")

    def test_issue_details(self, validator):
        """Test the error carries a structured issue."""
        with pytest.raises(ValidationError) as exc_info:
            validator.parse_amount("-1", field="principal")

        issue = exc_info.value.issues[0]
        assert issue.field == "principal"
        assert issue.issue_type == "invalid_value"


class TestParseDate:
    """Tests for date parsing."""

    def test_iso_date(self, validator):
        """Test a plain date becomes midnight UTC."""
        assert validator.parse_date("2024-03-01") == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_iso_datetime_with_z(self, validator):
        """Test a Z suffix is read as UTC."""
        assert validator.parse_date("2024-03-01T10:30:00Z") == datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)

    def test_date_object(self, validator):
        """Test date objects are accepted."""
        assert validator.parse_date(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", "yesterday", "2024-13-01", None])
    def test_invalid_dates(self, validator, value):
        """Test missing and unparseable dates are rejected."""
        with pytest.raises(ValidationError):
            validator.parse_date(value)


class TestRepaymentDay:
    """Tests for the day-of-month field."""

    def test_optional(self, validator):
        """Test an empty value means no due day."""
        assert validator.parse_repayment_day("") is None
        assert validator.parse_repayment_day(None) is None

    @pytest.mark.parametrize("value", ["0", "32", "first"])
    def test_out_of_range(self, validator, value):
        """Test values outside 1-31 are rejected."""
        with pytest.raises(ValidationError):
            validator.parse_repayment_day(value)


class TestValidateTerms:
    """Tests for full loan term validation."""

    def test_valid_terms(self, validator, raw_terms):
        """Test a complete form becomes LoanTerms."""
        terms = validator.validate_terms(raw_terms)

        assert terms.borrower_name == "Somchai"
        assert terms.borrower_kind == BorrowerKind.GROUP
        assert terms.principal == Decimal("1000")
        assert terms.total_interest_expected == Decimal("100.50")
        assert terms.term == LoanTerm.FIVE_MONTHS
        assert terms.start_date == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert terms.repayment_due_day == 5

    def test_defaults(self, validator):
        """Test optional fields fall back to defaults."""
        terms = validator.validate_terms({
            "borrower_name": "Malee",
            "principal": "500",
            "start_date": "2024-01-01",
        })

        assert terms.total_interest_expected == Decimal("0")
        assert terms.borrower_kind == BorrowerKind.INDIVIDUAL
        assert terms.term == LoanTerm.ONE_MONTH
        assert terms.repayment_due_day is None

    def test_collects_all_issues(self, validator):
        """Test every bad field is reported in one error."""
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_terms({
                "borrower_name": " ",
                "principal": "0",
                "total_interest_expected": "-1",
                "start_date": "not a date",
                "term": "2_YEARS",
                "repayment_due_day": "40",
            })

        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {
            "borrower_name",
            "principal",
            "total_interest_expected",
            "start_date",
            "term",
            "repayment_due_day",
        }

    def test_validation_error_is_value_error(self, validator):
        """Test callers catching ValueError still see validation failures."""
        with pytest.raises(ValueError):
            validator.validate_terms({})
