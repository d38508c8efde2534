"""
flagguard Validator Base — record capability protocols, error collection and
the AttributeValidator base class.

A validator never persists, commits or rejects a save. It reads the record,
optionally queries through it, and reports issues:
    - returned in a ValidationResult, and
    - pushed to an ErrorSink (explicit `errors` argument, else `record.errors`).

Hosts aggregate results of several validators before deciding what to do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from flagguard.engine.errors import FlagGuardAttributeError, FlagGuardTypeMismatchError

Translator = Callable[[str, Mapping[str, Any]], str]


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

@runtime_checkable
class Record(Protocol):
    """Capabilities a persistence layer must expose for record validators."""

    @property
    def record_type(self) -> str:
        """Type/class identifier used in messages and logs."""
        ...

    def get_attribute(self, name: str) -> Any:
        """Current value of `name`. Raises KeyError/AttributeError if unknown."""
        ...

    def count_by_attributes(self, filters: Mapping[str, Any]) -> int:
        """Number of persisted records of this type matching all filters."""
        ...


@runtime_checkable
class ErrorSink(Protocol):
    def add_error(self, record: Any, attribute: str, message: str) -> None:
        ...


RECORD_CAPABILITIES = ("record_type", "get_attribute", "count_by_attributes")


def ensure_record(obj: Any) -> Record:
    """Return `obj` if it supports the Record capabilities, else raise."""
    missing = []
    for name in RECORD_CAPABILITIES:
        try:
            value = getattr(obj, name)
        except AttributeError:
            missing.append(name)
            continue
        if name != "record_type" and not callable(value):
            missing.append(name)

    if missing:
        given = type(obj).__name__
        raise FlagGuardTypeMismatchError(
            f"Only records supporting {', '.join(RECORD_CAPABILITIES)} are supported, "
            f"{given} given (missing: {', '.join(missing)}).",
            given_type=given,
            missing=missing,
        )
    return obj


def read_attribute(record: Record, attribute: str) -> Any:
    """Read `attribute`, failing fast when the record does not have it."""
    try:
        return record.get_attribute(attribute)
    except (KeyError, AttributeError) as e:
        raise FlagGuardAttributeError(
            f"{record.record_type} has no attribute '{attribute}'",
            record_type=record.record_type,
            attribute=attribute,
        ) from e


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level validation failure."""
    record_type: str
    attribute: str
    message: str
    code: str = "invalid"
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_type": self.record_type,
            "attribute": self.attribute,
            "message": self.message,
            "code": self.code,
            "params": dict(self.params),
        }


@dataclass
class ValidationResult:
    """Outcome of one or more validator runs. Passed when no issues were reported."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    @property
    def failed(self) -> bool:
        return bool(self.issues)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.issues.extend(other.issues)
        return self

    def for_attribute(self, attribute: str) -> List[ValidationIssue]:
        return [i for i in self.issues if i.attribute == attribute]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "issues": [i.to_dict() for i in self.issues],
        }


class ErrorCollector:
    """
    In-memory ErrorSink, per-attribute messages in insertion order.

    Usage:
        errors = ErrorCollector()
        guard.validate(record, "is_promoted", errors=errors)
        if errors.has_errors():
            show(errors.get_errors("is_promoted"))
    """

    def __init__(self):
        self._errors: Dict[str, List[str]] = {}

    def add_error(self, record: Any, attribute: str, message: str) -> None:
        self._errors.setdefault(attribute, []).append(message)

    def has_errors(self, attribute: Optional[str] = None) -> bool:
        if attribute is None:
            return any(self._errors.values())
        return bool(self._errors.get(attribute))

    def get_errors(self, attribute: Optional[str] = None):
        """All errors as {attribute: [messages]}, or the list for one attribute."""
        if attribute is None:
            return {k: list(v) for k, v in self._errors.items()}
        return list(self._errors.get(attribute, []))

    def first_error(self, attribute: str) -> Optional[str]:
        messages = self._errors.get(attribute)
        return messages[0] if messages else None

    def clear(self, attribute: Optional[str] = None) -> None:
        if attribute is None:
            self._errors.clear()
        else:
            self._errors.pop(attribute, None)

    def __len__(self) -> int:
        return sum(len(v) for v in self._errors.values())

    def __repr__(self) -> str:
        return f"<ErrorCollector({len(self)} errors: {sorted(self._errors)})>"


# ---------------------------------------------------------------------------
# Validator base
# ---------------------------------------------------------------------------

class AttributeValidator:
    """
    Base class for validators run against one attribute of one record.

    Subclasses implement validate_attribute() and return the issues found.
    The base class checks the record's capabilities, pushes issues into the
    error sink and wraps them in a ValidationResult.
    """

    code = "invalid"

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        translator: Optional[Translator] = None,
    ):
        from flagguard.translations import validator_messages

        self.logger = logger or logging.getLogger(type(self).__module__)
        self.translator: Translator = translator or validator_messages.translate

    def validate(
        self,
        record: Any,
        attribute: str,
        errors: Optional[ErrorSink] = None,
    ) -> ValidationResult:
        """
        Validate `attribute` of `record`.

        Raises:
            FlagGuardTypeMismatchError: record lacks the Record capabilities.
            FlagGuardAttributeError: attribute is not readable on the record.
        """
        record = ensure_record(record)
        issues = self.validate_attribute(record, attribute)

        sink = errors if errors is not None else record_sink(record)
        if sink is not None:
            for issue in issues:
                sink.add_error(record, issue.attribute, issue.message)

        return ValidationResult(list(issues))

    def validate_attribute(self, record: Record, attribute: str) -> List[ValidationIssue]:
        raise NotImplementedError

    def client_options(self) -> Optional[Dict[str, Any]]:
        """Options a host may use for a client-side equivalent. None = no client check."""
        return None

    def message(self, key: str, params: Mapping[str, Any]) -> str:
        return self.translator(key, params)


def record_sink(record: Any) -> Optional[ErrorSink]:
    """record.errors when it accepts add_error(), else None."""
    sink = getattr(record, "errors", None)
    if sink is not None and callable(getattr(sink, "add_error", None)):
        return sink
    return None
