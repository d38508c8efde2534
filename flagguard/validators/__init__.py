"""flagguard Validators — record protocols, results, UniquenessGuard, registry."""

from flagguard.validators.base import (  # noqa: F401
    AttributeValidator,
    ErrorCollector,
    ErrorSink,
    Record,
    ValidationIssue,
    ValidationResult,
    ensure_record,
)
from flagguard.validators.registry import ValidationRule, ValidatorRegistry  # noqa: F401
from flagguard.validators.unique_flag import UniquenessGuard  # noqa: F401

__all__ = [
    "AttributeValidator",
    "ErrorCollector",
    "ErrorSink",
    "Record",
    "ValidationIssue",
    "ValidationResult",
    "ensure_record",
    "ValidationRule",
    "ValidatorRegistry",
    "UniquenessGuard",
]
