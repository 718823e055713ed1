"""
Unit tests for the exception hierarchy.
"""

import pytest

from shieldpool.errors import (
    AnonymitySetFull,
    CommitmentAlreadyExists,
    ConfigurationError,
    ConstraintUnsatisfied,
    CryptographicError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    IndexOutOfBounds,
    InvalidProof,
    LedgerError,
    NullifierAlreadyUsed,
    SerializationError,
    SetupFailure,
    ShieldPoolError,
    ValidationError,
)


class TestShieldPoolError:
    """Test the base error."""

    def test_defaults(self):
        """Test default attributes."""
        error = ShieldPoolError("boom")
        assert error.message == "boom"
        assert error.error_code == "ShieldPoolError"
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.category == ErrorCategory.SYSTEM
        assert str(error) == "ShieldPoolError: boom"

    def test_to_dict(self):
        """Test dictionary conversion carries context and cause."""
        cause = ValueError("inner")
        context = ErrorContext(component="bridge", operation="withdraw")
        error = ShieldPoolError("outer", context=context, cause=cause, metadata={"k": 1})
        data = error.to_dict()
        assert data["type"] == "ShieldPoolError"
        assert data["context"]["component"] == "bridge"
        assert data["cause"] == "inner"
        assert data["metadata"] == {"k": 1}

    def test_str_includes_non_default_fields(self):
        """Test severity and code appear in the string form."""
        error = ShieldPoolError("x", error_code="E1", severity=ErrorSeverity.HIGH)
        text = str(error)
        assert "Code: E1" in text
        assert "Severity: high" in text


class TestHierarchy:
    """Test categories and inheritance."""

    @pytest.mark.parametrize(
        "error_class, parent",
        [
            (IndexOutOfBounds, ValidationError),
            (ConfigurationError, ValidationError),
            (SerializationError, CryptographicError),
            (ConstraintUnsatisfied, CryptographicError),
            (SetupFailure, CryptographicError),
            (CommitmentAlreadyExists, LedgerError),
            (NullifierAlreadyUsed, LedgerError),
            (InvalidProof, LedgerError),
            (AnonymitySetFull, LedgerError),
        ],
    )
    def test_subclasses(self, error_class, parent):
        """Test every error derives from its family and the base."""
        assert issubclass(error_class, parent)
        assert issubclass(error_class, ShieldPoolError)

    def test_index_out_of_bounds(self):
        """Test index details are recorded."""
        error = IndexOutOfBounds(7, 4)
        assert error.index == 7
        assert error.leaf_count == 4
        assert error.field == "index"
        assert error.category == ErrorCategory.VALIDATION

    def test_configuration_category(self):
        """Test configuration errors keep their own category."""
        assert ConfigurationError("bad").category == ErrorCategory.CONFIGURATION

    def test_cryptographic_defaults(self):
        """Test algorithm and severity of cryptographic errors."""
        error = SerializationError("bad point", algorithm="bls12-381")
        assert error.severity == ErrorSeverity.HIGH
        assert error.to_dict()["algorithm"] == "bls12-381"
        assert SetupFailure("no").severity == ErrorSeverity.CRITICAL

    def test_constraint_annotation(self):
        """Test the failing constraint is exposed."""
        error = ConstraintUnsatisfied("unsatisfied", constraint="commitment chunk 0")
        assert error.constraint == "commitment chunk 0"

    def test_double_spend_severity(self):
        """Test double spends are high severity ledger errors."""
        error = NullifierAlreadyUsed("spent")
        assert error.category == ErrorCategory.LEDGER
        assert error.severity == ErrorSeverity.HIGH
