"""Help callback capability.

A help callback is anything implementing HandlesHelpRequest: an async
callable taking (event, words) and answering whether it handled the
request. Plain functions are adapted with help_callback().
"""

import asyncio
import functools
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, List, Optional, Type

from ..events import TextMessage
from ..exceptions import InvalidCallbackSignature


class HelpResult(Enum):
    """Outcome of one help callback invocation."""
    HANDLED = "handled"
    NOT_HANDLED = "not_handled"

    @classmethod
    def coerce(cls, value: Any) -> "HelpResult":
        """Accept a HelpResult or a legacy truthy/falsy return value."""
        if isinstance(value, cls):
            return value
        return cls.HANDLED if value else cls.NOT_HANDLED

    def __bool__(self) -> bool:
        return self is HelpResult.HANDLED


class HandlesHelpRequest(ABC):
    """Capability of answering help requests.

    Attributes:
        event_type: The event class this callback accepts. Must be
            TextMessage or a subclass of it.
    """

    event_type: Type = TextMessage

    @abstractmethod
    async def __call__(self, event: TextMessage, words: List[Optional[str]]) -> HelpResult:
        """Answer a help request.

        ``words[0]`` is the lower-cased module name the request was
        addressed to, or None when it was broadcast to every module.
        The remaining items are the request's words.
        """


class FunctionHelpCallback(HandlesHelpRequest):
    """Adapts a plain or coroutine function to HandlesHelpRequest."""

    def __init__(self, fn: Callable[..., Any], event_type: Type = TextMessage):
        self.fn = fn
        self.event_type = event_type
        functools.update_wrapper(self, fn)

    async def __call__(self, event, words):
        result = self.fn(event, words)
        if asyncio.iscoroutine(result):
            result = await result
        return HelpResult.coerce(result)

    def __eq__(self, other):
        if isinstance(other, FunctionHelpCallback):
            return self.fn == other.fn and self.event_type is other.event_type
        return NotImplemented

    def __hash__(self):
        return hash((self.fn, self.event_type))

    def __repr__(self) -> str:
        return f"FunctionHelpCallback({self.fn!r}, event_type={self.event_type.__name__})"


def help_callback(fn=None, *, event_type: Type = TextMessage):
    """Wrap ``fn`` as a help callback. Usable as a decorator.

    ``@help_callback`` or ``@help_callback(event_type=ChannelTextMessage)``.
    """
    def _wrap(f):
        if isinstance(f, HandlesHelpRequest):
            return f
        return FunctionHelpCallback(f, event_type=event_type)

    if fn is None:
        return _wrap
    return _wrap(fn)


def validate_callback(callback: Any, module_id: Optional[str] = None) -> HandlesHelpRequest:
    """Check that ``callback`` can answer text-message help requests.

    Raises:
        InvalidCallbackSignature: If the callback does not implement
            HandlesHelpRequest or declares a non text-message event type.
    """
    if not isinstance(callback, HandlesHelpRequest):
        raise InvalidCallbackSignature(
            "Help callback must implement HandlesHelpRequest",
            module_id=module_id,
            callback_type=type(callback).__name__,
        )
    event_type = getattr(callback, "event_type", None)
    if not isinstance(event_type, type) or not issubclass(event_type, TextMessage):
        raise InvalidCallbackSignature(
            module_id=module_id,
            event_type=getattr(event_type, "__name__", repr(event_type)),
        )
    return callback
