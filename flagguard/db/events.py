"""
flagguard flush hook — run a ValidatorRegistry before SQLAlchemy flushes.

The validators only report; this hook is the host that rejects the save.
On any issue it raises FlagGuardValidationError out of flush()/commit(),
leaving the caller to roll back.

Checked instances:
    - new instances of a registered type: all rules
    - dirty instances: only rules whose attribute has a net change

Counts include the other instances in the same flush (see SQLAlchemyRecord
include_pending), so every new holder of a guarded value is reported when
more than one would end up stored.

Rules are looked up by mapped class name first, then by __tablename__, so
rules keyed on table names in flagguard.yaml apply too.

Usage:
    registry = ValidatorRegistry.from_config(load_config())
    install_flush_guard(SessionFactory, registry)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from sqlalchemy import event, inspect

from flagguard.engine.errors import FlagGuardValidationError
from flagguard.engine.logging import log, log_host_rejection
from flagguard.db.records import SQLAlchemyRecord
from flagguard.translations import validator_messages
from flagguard.validators.base import ValidationIssue
from flagguard.validators.registry import ValidatorRegistry

logger = logging.getLogger("flagguard.db.events")


def _registry_key(instance: Any, registry: ValidatorRegistry) -> Optional[str]:
    model = type(instance)
    for key in (model.__name__, getattr(model, "__tablename__", None)):
        if key and key in registry:
            return key
    return None


def _changed(instance: Any, attribute: str) -> bool:
    state = inspect(instance)
    if attribute not in state.attrs:
        return False
    return state.attrs[attribute].history.has_changes()


def validate_session(session: Any, registry: ValidatorRegistry) -> List[ValidationIssue]:
    """Validate pending/dirty instances in `session`. Returns all issues found."""
    issues: List[ValidationIssue] = []
    new = set(session.new)

    for instance in list(session.new) + list(session.dirty):
        key = _registry_key(instance, registry)
        if key is None:
            continue

        attributes = registry.attributes_for(key)
        if instance not in new:
            attributes = [a for a in attributes if _changed(instance, a)]
            if not attributes:
                continue

        record = SQLAlchemyRecord(instance, session, include_pending=True)
        result = registry.validate(record, attributes=attributes, record_type=key)
        issues.extend(result.issues)

    return issues


def install_flush_guard(target: Any, registry: ValidatorRegistry) -> Callable:
    """
    Listen for before_flush on a Session, sessionmaker or Session class.

    Returns the listener so it can be passed to remove_flush_guard().
    """

    def _validate_before_flush(session, flush_context, instances):
        issues = validate_session(session, registry)
        if not issues:
            return

        record_types = [i.record_type for i in issues]
        logger.warning(
            f"Flush rejected: {len(issues)} validation issue(s) on {', '.join(sorted(set(record_types)))}"
        )
        log(log_host_rejection("sqlalchemy.before_flush", record_types, len(issues)))
        raise FlagGuardValidationError(
            validator_messages.get("save_rejected", count=len(issues)),
            validation_errors=issues,
            record_type=issues[0].record_type,
            attribute=issues[0].attribute,
        )

    event.listen(target, "before_flush", _validate_before_flush)
    return _validate_before_flush


def remove_flush_guard(target: Any, listener: Callable) -> None:
    event.remove(target, "before_flush", listener)
