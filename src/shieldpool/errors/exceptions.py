"""Exception hierarchy for shieldpool.

Every error raised by the pool derives from ``ShieldPoolError`` and carries a
category, a severity and an optional context describing the component and
operation that failed. None of them are treated as fatal by the library
itself; callers decide how to escalate.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    CRYPTOGRAPHIC = "cryptographic"
    LEDGER = "ledger"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "component": self.component,
            "operation": self.operation,
            "metadata": self.metadata,
        }


class ShieldPoolError(Exception):
    """Base exception for all shieldpool errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.metadata = metadata or {}
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code != self.__class__.__name__:
            parts.append(f"Code: {self.error_code}")

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        return " | ".join(parts)


class ValidationError(ShieldPoolError):
    """Input that is out of range or has the wrong shape."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("category", ErrorCategory.VALIDATION)
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class IndexOutOfBounds(ValidationError):
    """Inclusion proof requested for a leaf index that is not present."""

    def __init__(self, index: int, leaf_count: int, **kwargs):
        super().__init__(
            f"Leaf index {index} out of bounds for {leaf_count} leaves",
            field="index",
            value=index,
            expected=f"0 <= index < {leaf_count}",
            **kwargs,
        )
        self.index = index
        self.leaf_count = leaf_count


class ConfigurationError(ValidationError):
    """Invalid configuration value."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)


class CryptographicError(ShieldPoolError):
    """Cryptographic error."""

    def __init__(self, message: str, algorithm: Optional[str] = None, **kwargs):
        kwargs.setdefault("category", ErrorCategory.CRYPTOGRAPHIC)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)
        self.algorithm = algorithm

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["algorithm"] = self.algorithm
        return data


class SerializationError(CryptographicError):
    """Malformed proof or key bytes, or a value that could not be encoded."""


class ConstraintUnsatisfied(CryptographicError):
    """The supplied witness does not satisfy the circuit relation."""

    def __init__(self, message: str, constraint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.constraint = constraint


class SetupFailure(CryptographicError):
    """Trusted setup could not produce parameters."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.CRITICAL)
        super().__init__(message, **kwargs)


class LedgerError(ShieldPoolError):
    """Rejected ledger operation."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.LEDGER)
        super().__init__(message, **kwargs)


class CommitmentAlreadyExists(LedgerError):
    """Commitment is already recorded."""


class CommitmentNotFound(LedgerError):
    """Commitment is not recorded."""


class NullifierAlreadyUsed(LedgerError):
    """Nullifier was consumed before (double-spend attempt)."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class InvalidProof(LedgerError):
    """Proof did not verify against the installed verifying key."""


class AnonymitySetFull(LedgerError):
    """The anonymity set reached its capacity."""


class AssetNotRegistered(LedgerError):
    """External asset id has no local registration."""


class DepositBelowMinimum(LedgerError):
    """Deposit amount is below the asset's minimum."""


class VerifyingKeyNotSet(LedgerError):
    """No verifying key has been installed."""


class VerifyingKeyTooLarge(LedgerError):
    """Serialized verifying key exceeds the storage bound."""
