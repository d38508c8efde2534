"""
flagguard Validator Registry — the host-side validation pass.

Maps record types to (attribute, validator) rules and runs every rule for a
record, aggregating issues so the host can decide whether to reject the save.

Usage:
    registry = ValidatorRegistry()
    registry.register("Poll", "is_promoted", UniquenessGuard())

    errors = ErrorCollector()
    result = registry.validate(SQLAlchemyRecord(poll, session), errors=errors)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from flagguard.validators.base import (
    AttributeValidator,
    ErrorCollector,
    ErrorSink,
    ValidationResult,
    ensure_record,
    record_sink,
)

logger = logging.getLogger("flagguard.validators.registry")


@dataclass(frozen=True)
class ValidationRule:
    """A validator bound to one attribute of one record type."""
    record_type: str
    attribute: str
    validator: AttributeValidator

    def __repr__(self) -> str:
        return f"<ValidationRule({self.record_type}.{self.attribute} → {self.validator!r})>"


class ValidatorRegistry:
    """Per-record-type validation rules, in registration order."""

    def __init__(self):
        self._rules: Dict[str, List[ValidationRule]] = {}

    def register(self, record_type: str, attribute: str, validator: AttributeValidator) -> ValidationRule:
        rule = ValidationRule(record_type=record_type, attribute=attribute, validator=validator)
        self._rules.setdefault(record_type, []).append(rule)
        logger.debug(f"Registered rule: {rule!r}")
        return rule

    def rules_for(self, record_type: str) -> List[ValidationRule]:
        return list(self._rules.get(record_type, []))

    def attributes_for(self, record_type: str) -> List[str]:
        seen: List[str] = []
        for rule in self._rules.get(record_type, []):
            if rule.attribute not in seen:
                seen.append(rule.attribute)
        return seen

    @property
    def record_types(self) -> List[str]:
        return list(self._rules.keys())

    def __contains__(self, record_type: str) -> bool:
        return bool(self._rules.get(record_type))

    def validate(
        self,
        record: Any,
        errors: Optional[ErrorSink] = None,
        attributes: Optional[Iterable[str]] = None,
        record_type: Optional[str] = None,
    ) -> ValidationResult:
        """
        Run every rule registered for record.record_type.

        Args:
            record: A Record.
            errors: Sink for messages. Defaults to record.errors when it has add_error(), else a fresh ErrorCollector.
            attributes: Only run rules on these attributes.
            record_type: Rule set to use instead of record.record_type.

        Returns:
            Aggregated ValidationResult.
        """
        record = ensure_record(record)
        if errors is None:
            errors = record_sink(record)
        if errors is None:
            errors = ErrorCollector()

        only = set(attributes) if attributes is not None else None
        result = ValidationResult()
        for rule in self._rules.get(record_type or record.record_type, []):
            if only is not None and rule.attribute not in only:
                continue
            result.merge(rule.validator.validate(record, rule.attribute, errors=errors))

        if result.failed:
            logger.debug(f"{record.record_type}: {len(result.issues)} validation issue(s)")
        return result

    def client_options(self, record_type: str) -> Dict[str, List[Dict[str, Any]]]:
        """Client-side check options per attribute, for validators that request one."""
        options: Dict[str, List[Dict[str, Any]]] = {}
        for rule in self._rules.get(record_type, []):
            opts = rule.validator.client_options()
            if opts is not None:
                options.setdefault(rule.attribute, []).append(opts)
        return options

    @classmethod
    def from_config(cls, config, **validator_kwargs: Any) -> "ValidatorRegistry":
        """Build UniquenessGuard rules from FlagGuardConfig.guards."""
        from flagguard.validators.unique_flag import UniquenessGuard

        registry = cls()
        for rule in config.guards:
            registry.register(
                rule.record,
                rule.attribute,
                UniquenessGuard(rule.guard_config(), **validator_kwargs),
            )
        return registry
