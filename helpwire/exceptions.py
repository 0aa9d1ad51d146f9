"""Custom exception hierarchy for helpwire.

Only registration-time and startup failures are exceptions. The
"no such module" and "no help available" outcomes of a help request
are user-visible replies, never raised.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for escalation decisions."""
    PERMANENT = "permanent"            # Caller bug, e.g. a malformed help callback
    INFRASTRUCTURE = "infrastructure"  # Host/environment issue, e.g. trigger collision


class HelpwireError(Exception):
    """Base exception for all helpwire errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification.
        module: Originating bot module or subsystem name.
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


# ---------------------------------------------------------------------------
# Help registration
# ---------------------------------------------------------------------------

class InvalidCallbackSignature(HelpwireError):
    """A help callback does not accept text-message events.

    Raised to the registering module only; the registry is left
    untouched and other modules' registrations are unaffected.

    Attributes:
        module_id: Normalized identifier the callback was registered under.
    """

    def __init__(
        self,
        message: str = "Invalid signature",
        *,
        module_id: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.module_id = module_id
        super().__init__(
            message, category=category, module=module or module_id, **context
        )


class TriggerAcquisitionFailed(HelpwireError):
    """The trigger allocator refused to reserve the help trigger.

    Fatal to the Helper module: it cannot answer anything without a
    trigger, so its initialization must not complete.

    Attributes:
        trigger: The token that could not be reserved.
    """

    def __init__(
        self,
        message: str = "Could not register Help trigger",
        *,
        trigger: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.trigger = trigger
        super().__init__(
            message, category=category, module=module or "helper",
            trigger=trigger, **context
        )


# ---------------------------------------------------------------------------
# Host
# ---------------------------------------------------------------------------

class ModuleLoadError(HelpwireError):
    """A bot module failed to initialize and was not added to its scope."""

    def __init__(
        self,
        message: str = "",
        *,
        module_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.module_name = module_name
        super().__init__(
            message, category=category, module=module or "modules", **context
        )


class ConfigurationError(HelpwireError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
