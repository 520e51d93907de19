"""
Structured error types for usysconf.

Every failure the trigger runner can raise carries a category, a fatality
flag and a small structured context (trigger name, path, free metadata) so
that the dispatcher and the CLI can decide how far a failure propagates and
log it without string parsing.

Manifesto:
    - **Typed hierarchy:** One subclass per failure domain
    - **Explicit fatality:** Each error knows whether it aborts a whole run
    - **Rich context:** Errors carry the trigger and path they relate to
    - **Error chaining:** Preserve the underlying OSError / ValidationError

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      UsysconfError                           │
        │            (category, fatal, context, cause)                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError          StateError          TriggerError       │
        │  (CONFIG, fatal)      (STATE)             (TRIGGER, fatal)   │
        │       │                   │                    │              │
        │  PermissionDenied     StateLoadError      UnknownTrigger     │
        │                       StateRecordError                       │
        │  LogDirectoryError    StateWriteError     HandlerError       │
        │  (FILESYSTEM, fatal)                      (HANDLER)          │
        │                                                              │
        │  EnvironmentDetectionError (ENVIRONMENT)                     │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = UnknownTriggerError("nope")
    >>> error.fatal
    True
    >>> error.to_dict()["category"]
    'TRIGGER'

    >>> StateLoadError("corrupt").with_context(path="/var/lib/usysconf/status.json").fatal
    False

Guardrails:
    ❌ DON'T: Raise a fatal error from inside a handler action
    ✅ DO: Return ``Status.FAIL`` and let the dispatcher isolate it

    ❌ DON'T: Swallow the original OSError
    ✅ DO: Pass it as ``cause=`` for error chaining

Tags:
    error-handling, exception-hierarchy, usysconf

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and log routing.

    Attributes:
        CONFIG: Invalid settings or privileges
        STATE: Persisted fingerprint state could not be read or written
        FILESYSTEM: Directories the run depends on are unusable
        TRIGGER: Trigger selection errors
        HANDLER: A handler action misbehaved
        ENVIRONMENT: chroot / live / container probing failed
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    STATE = "STATE"
    FILESYSTEM = "FILESYSTEM"
    TRIGGER = "TRIGGER"
    HANDLER = "HANDLER"
    ENVIRONMENT = "ENVIRONMENT"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        trigger: Name of the handler being run
        path: Filesystem path the error relates to
        metadata: Additional key-value pairs
    """

    trigger: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("trigger", "path"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UsysconfError(Exception):
    """
    Base exception for all usysconf errors.

    Subclasses set ``default_category`` and ``default_fatal``. A fatal error
    aborts the whole run; a non-fatal one is logged and the run carries on.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_fatal: bool = True

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        fatal: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.fatal = fatal if fatal is not None else self.default_fatal
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UsysconfError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StateWriteError("disk full").with_context(path=str(state_file))
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(UsysconfError):
    """Configuration error. The run cannot start until it is fixed."""

    default_category = ErrorCategory.CONFIG


class PermissionDeniedError(ConfigError):
    """Triggers must be run with root privileges."""

    def __init__(self, message: str = "You must have root privileges to run triggers"):
        super().__init__(message)


# =============================================================================
# FILESYSTEM ERRORS
# =============================================================================


class LogDirectoryError(UsysconfError):
    """The run log directory could not be created."""

    default_category = ErrorCategory.FILESYSTEM

    def __init__(self, directory: str, cause: Exception | None = None):
        self.directory = directory
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot construct log directory {directory}{reason}", cause=cause)
        self.context.path = directory


# =============================================================================
# STATE ERRORS
# =============================================================================


class StateError(UsysconfError):
    """Persisted state problem."""

    default_category = ErrorCategory.STATE
    default_fatal = False


class StateLoadError(StateError):
    """State file missing or corrupt. The run proceeds with empty state."""

    pass


class StateRecordError(StateError):
    """A fingerprint could not be computed or stored for a path."""

    pass


class StateWriteError(StateError):
    """The state file could not be replaced. The run reports failure."""

    pass


# =============================================================================
# TRIGGER / HANDLER ERRORS
# =============================================================================


class TriggerError(UsysconfError):
    """Trigger selection error."""

    default_category = ErrorCategory.TRIGGER


class UnknownTriggerError(TriggerError):
    """No handler in the registry carries the requested name."""

    def __init__(self, name: str):
        self.trigger_name = name
        super().__init__(f"Unknown trigger '{name}'")
        self.context.trigger = name


class HandlerError(UsysconfError):
    """A handler action raised instead of returning a status."""

    default_category = ErrorCategory.HANDLER
    default_fatal = False


class EnvironmentDetectionError(UsysconfError):
    """Probing for chroot / live medium / container failed."""

    default_category = ErrorCategory.ENVIRONMENT
    default_fatal = False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "UsysconfError",
    "ConfigError",
    "PermissionDeniedError",
    "LogDirectoryError",
    "StateError",
    "StateLoadError",
    "StateRecordError",
    "StateWriteError",
    "TriggerError",
    "UnknownTriggerError",
    "HandlerError",
    "EnvironmentDetectionError",
]
