"""
flagguard — "single active flag" validation for record models.
Version: 1.0

Among all persisted records of a type, at most one may hold a boolean
attribute at a configured value (one promoted poll, one default address...).

    from flagguard import UniquenessGuard, ErrorCollector
    from flagguard.db import SQLAlchemyRecord

    guard = UniquenessGuard(guarded_value=True)
    errors = ErrorCollector()
    result = guard.validate(SQLAlchemyRecord(poll, session), "is_promoted", errors=errors)
"""

__version__ = "1.0.0"
__all__ = [
    "GuardConfig",
    "UniquenessGuard",
    "ErrorCollector",
    "ValidationIssue",
    "ValidationResult",
    "ValidatorRegistry",
    "Record",
]

from flagguard.engine.config import GuardConfig  # noqa: E402
from flagguard.validators import (  # noqa: E402
    ErrorCollector,
    Record,
    UniquenessGuard,
    ValidationIssue,
    ValidationResult,
    ValidatorRegistry,
)
