"""flagguard Engine — configuration, errors, execution context, logging."""

from flagguard.engine.config import FlagGuardConfig, GuardConfig, GuardRuleConfig  # noqa: F401
from flagguard.engine.errors import (  # noqa: F401
    FlagGuardAttributeError,
    FlagGuardConfigError,
    FlagGuardError,
    FlagGuardTypeMismatchError,
    FlagGuardValidationError,
)

__all__ = [
    "FlagGuardConfig",
    "GuardConfig",
    "GuardRuleConfig",
    "FlagGuardError",
    "FlagGuardAttributeError",
    "FlagGuardConfigError",
    "FlagGuardTypeMismatchError",
    "FlagGuardValidationError",
]
