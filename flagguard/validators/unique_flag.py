"""
UniquenessGuard — at most one record of a type may hold a boolean flag value.

Example: in a polls system only one poll can be "promoted to front page".
The promotion is a boolean column; this validator makes sure a poll is only
saved as promoted when no other promoted poll exists. It does NOT demote the
other poll. That is business logic for the caller.

Algorithm:
    1) record.<attribute> is not the guarded value → pass, no query.
    2) otherwise count persisted records of the type with
       <attribute> == guarded value; any match → one error on the attribute.

The count includes the candidate itself when it is already persisted with
the guarded value.

Comparison is exact: only a real bool identical to guarded_value matches.
0, 1, "", "1" or None never count as the guarded value.

LIMITATIONS:
    No locking, no isolation level. Two concurrent check-then-save sequences
    can both see a count of 0 and both persist the guarded value.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from flagguard.engine.config import GuardConfig
from flagguard.engine.errors import FlagGuardConfigError
from flagguard.validators.base import (
    AttributeValidator,
    Record,
    Translator,
    ValidationIssue,
    read_attribute,
)

DUPLICATE_GUARDED_VALUE = "duplicate_guarded_value"


def format_flag(value: Any) -> str:
    """Render a guarded value for messages: true / false."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class UniquenessGuard(AttributeValidator):
    """
    Validates that only one persisted record of the candidate's type has
    `attribute` set to the guarded value.

    Usage:
        guard = UniquenessGuard(guarded_value=True)
        result = guard.validate(SQLAlchemyRecord(poll, session), "is_promoted")
        if result.failed:
            ...
    """

    code = DUPLICATE_GUARDED_VALUE

    def __init__(
        self,
        config: Optional[GuardConfig] = None,
        *,
        logger: Optional[logging.Logger] = None,
        translator: Optional[Translator] = None,
        **options: Any,
    ):
        if config is not None and options:
            raise FlagGuardConfigError(
                "Pass either a GuardConfig or keyword options, not both",
                options=sorted(options),
            )
        if config is None:
            try:
                config = GuardConfig(**options)
            except ValidationError as e:
                raise FlagGuardConfigError(f"Invalid guard options: {e}", options=options) from e

        super().__init__(logger=logger, translator=translator)
        self.config = config

    @property
    def guarded_value(self) -> bool:
        return self.config.guarded_value

    @property
    def client_side_check_enabled(self) -> bool:
        return self.config.client_side_check_enabled

    def matches_guarded_value(self, value: Any) -> bool:
        return isinstance(value, bool) and value is self.config.guarded_value

    def validate_attribute(self, record: Record, attribute: str) -> List[ValidationIssue]:
        current = read_attribute(record, attribute)
        if not self.matches_guarded_value(current):
            return []

        guarded = self.config.guarded_value
        counter = int(record.count_by_attributes({attribute: guarded}))
        if counter <= 0:
            return []

        params = {
            "class_name": record.record_type,
            "attribute": attribute,
            "unique_bool": format_flag(guarded),
        }
        message = self.message(DUPLICATE_GUARDED_VALUE, params)

        self.logger.info(
            "found %d records of type %s with attribute %s set to %s; validation failed",
            counter, record.record_type, attribute, format_flag(guarded),
            extra={
                "source": f"{type(self).__module__}.{type(self).__name__}.validate_attribute",
                "record_type": record.record_type,
                "attribute": attribute,
                "count": counter,
            },
        )

        return [ValidationIssue(
            record_type=record.record_type,
            attribute=attribute,
            message=message,
            code=DUPLICATE_GUARDED_VALUE,
            params={**params, "count": counter},
        )]

    def client_options(self) -> Optional[Dict[str, Any]]:
        if not self.config.client_side_check_enabled:
            return None
        return {
            "validator": type(self).__name__,
            "code": DUPLICATE_GUARDED_VALUE,
            "guarded_value": self.config.guarded_value,
        }

    def __repr__(self) -> str:
        return f"<UniquenessGuard(guarded_value={format_flag(self.config.guarded_value)})>"
