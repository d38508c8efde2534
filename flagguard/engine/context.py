"""
flagguard Execution Context — per-request state carried via contextvars.

Hosts set an ExecutionContext at the start of a request (or save) so that
validator messages are rendered in the user's language and errors/log entries
carry a correlation id.

Usage:
    from flagguard.engine.context import ExecutionContext, set_execution_context

    set_execution_context(ExecutionContext(user_id=42, preferred_language="fr"))
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

current_execution_context: ContextVar[Optional["ExecutionContext"]] = ContextVar(
    "flagguard_execution_context", default=None
)


@dataclass
class ExecutionContext:
    """Per-request context. Only what validators need: who, which language, trace id."""

    user_id: Optional[Any] = None
    execution_id: str = field(default_factory=lambda: f"exec_{uuid.uuid4().hex[:12]}")
    preferred_language: str = "en"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging."""
        return {
            "user_id": self.user_id,
            "execution_id": self.execution_id,
            "preferred_language": self.preferred_language,
        }


def set_execution_context(ctx: ExecutionContext) -> None:
    """Set the execution context for the current thread/task."""
    current_execution_context.set(ctx)


def get_execution_context() -> Optional[ExecutionContext]:
    """Get the current execution context. Returns None if not set."""
    return current_execution_context.get()


def clear_execution_context() -> None:
    """Clear the execution context (e.g., at request end)."""
    current_execution_context.set(None)


def get_preferred_language() -> str:
    """Current user's preferred language, "en" when no context is set."""
    ctx = get_execution_context()
    return ctx.preferred_language if ctx else "en"
