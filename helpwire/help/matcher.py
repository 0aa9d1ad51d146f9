"""Recognizes help invocations among incoming text messages."""

from enum import Enum
from typing import List

from ..events import Event, TextMessage


class PrefixMode(str, Enum):
    """How the command prefix ("!") relates to the trigger."""
    REQUIRED = "required"  # "!help" only
    OPTIONAL = "optional"  # "!help" or "help"
    NONE = "none"          # "help" only


class TriggerMatcher:
    """Matches "<prefix><trigger>" and "<prefix><trigger> <anything>".

    The trigger comparison is case sensitive.

    Args:
        trigger: The help command word, e.g. "help".
        prefix: Command delimiter placed before the trigger.
        prefix_mode: Whether the delimiter is required, optional or unused.
    """

    def __init__(
        self,
        trigger: str,
        prefix: str = "!",
        prefix_mode: PrefixMode = PrefixMode.REQUIRED,
    ):
        self.trigger = trigger
        self.prefix = prefix
        self.prefix_mode = PrefixMode(prefix_mode)

    @property
    def wildcard(self) -> str:
        return f"{self.trigger} *"

    def _strip_prefix(self, text: str):
        """Return ``text`` without its command delimiter, or None if it
        does not satisfy the prefix mode."""
        if self.prefix_mode is PrefixMode.NONE or not self.prefix:
            return text
        if text.startswith(self.prefix):
            return text[len(self.prefix):]
        if self.prefix_mode is PrefixMode.OPTIONAL:
            return text
        return None

    def matches_text(self, text: str) -> bool:
        body = self._strip_prefix(text)
        if body is None:
            return False
        return body == self.trigger or body.startswith(self.trigger + " ")

    def matches(self, event: Event) -> bool:
        """Bus predicate: a text message invoking the trigger."""
        return isinstance(event, TextMessage) and self.matches_text(event.text)

    def tokenize(self, text: str) -> List[str]:
        """Words following the trigger, split on runs of whitespace."""
        body = self._strip_prefix(text)
        if body is None:
            body = text
        return body.split()[1:]
