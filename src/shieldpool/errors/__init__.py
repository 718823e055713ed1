"""shieldpool error handling.

Exception hierarchy shared by the cryptographic core and the reference
ledger.
"""

from .exceptions import (
    AnonymitySetFull,
    AssetNotRegistered,
    CommitmentAlreadyExists,
    CommitmentNotFound,
    ConfigurationError,
    ConstraintUnsatisfied,
    CryptographicError,
    DepositBelowMinimum,
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
    VerifyingKeyNotSet,
    VerifyingKeyTooLarge,
)

__all__ = [
    "ShieldPoolError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    # Validation
    "ValidationError",
    "IndexOutOfBounds",
    "ConfigurationError",
    # Cryptographic
    "CryptographicError",
    "SerializationError",
    "ConstraintUnsatisfied",
    "SetupFailure",
    # Ledger
    "LedgerError",
    "CommitmentAlreadyExists",
    "CommitmentNotFound",
    "NullifierAlreadyUsed",
    "InvalidProof",
    "AnonymitySetFull",
    "AssetNotRegistered",
    "DepositBelowMinimum",
    "VerifyingKeyNotSet",
    "VerifyingKeyTooLarge",
]
