"""
flagguard Error Hierarchy — Structured exceptions for validator failures.

Errors carry the execution_id of the current ExecutionContext (if any) so a
failed save can be traced back to the request that triggered it.

Only configuration and programming errors are raised by validators. A record
that fails a uniqueness check is NOT an exception: it is reported as a
ValidationIssue through the normal validation-result channel. Hosts that want
to abort a save (e.g. the SQLAlchemy flush hook) raise FlagGuardValidationError.

Hierarchy:
    FlagGuardError
    ├── FlagGuardTypeMismatchError  — Record lacks the required capabilities
    ├── FlagGuardAttributeError     — Attribute not readable on the record
    ├── FlagGuardConfigError        — Invalid configuration
    └── FlagGuardValidationError    — Host rejected a save after validation
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class FlagGuardError(Exception):
    """
    Base error for all flagguard failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.execution_id: Optional[str] = context.get("execution_id") or _current_execution_id()
        self.record_type: Optional[str] = context.get("record_type")
        self.attribute: Optional[str] = context.get("attribute")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "execution_id": self.execution_id,
            "record_type": self.record_type,
            "attribute": self.attribute,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("execution_id", "record_type", "attribute")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.record_type:
            parts.append(f"record_type={self.record_type}")
        if self.attribute:
            parts.append(f"attribute={self.attribute}")
        if self.execution_id:
            parts.append(f"execution_id={self.execution_id}")
        return " | ".join(parts)


class FlagGuardTypeMismatchError(FlagGuardError):
    """
    The object handed to a validator does not support the Record
    capabilities (attribute read, type name, filtered count query).
    """

    def __init__(self, message: str, **context: Any):
        self.given_type: Optional[str] = context.get("given_type")
        self.missing: List[str] = list(context.get("missing", []))
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["given_type"] = self.given_type
        d["missing"] = self.missing
        return d


class FlagGuardAttributeError(FlagGuardError):
    """The validated attribute does not exist on the record."""
    pass


class FlagGuardConfigError(FlagGuardError):
    """Configuration error — invalid flagguard.yaml or GuardConfig values."""

    def __init__(self, message: str, **context: Any):
        self.config_path: Optional[str] = context.get("config_path")
        super().__init__(message, **context)


class FlagGuardValidationError(FlagGuardError):
    """
    A host refused to persist records because validation failed.
    Includes the field-level issues that caused the rejection.
    """

    def __init__(self, message: str, **context: Any):
        self.validation_errors: List[Any] = list(context.get("validation_errors", []))
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["validation_errors"] = [
            issue.to_dict() if hasattr(issue, "to_dict") else str(issue)
            for issue in self.validation_errors
        ]
        return d


def _current_execution_id() -> Optional[str]:
    from flagguard.engine.context import get_execution_context

    ctx = get_execution_context()
    return ctx.execution_id if ctx else None
