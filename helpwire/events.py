"""Chat events delivered by the event bus.

``TextMessage`` is the text-message capability: any event carrying a
sender and a line of text. Help callbacks must accept it (or a
subclass) as their event type.
"""

import re
from dataclasses import dataclass
from typing import Optional

_WORD_BOUNDARY = re.compile(r"\s+")


@dataclass(frozen=True)
class Event:
    """Base class for everything the bus delivers."""


@dataclass(frozen=True)
class TextMessage(Event):
    """A line of text sent by someone."""

    source: str
    text: str

    def tokens(self, start: int = 0) -> str:
        """Return the text from the ``start``-th word onwards.

        Spacing between the returned words is preserved; only the
        leading and trailing whitespace is dropped.
        """
        remainder = self.text.strip()
        for _ in range(start):
            parts = _WORD_BOUNDARY.split(remainder, maxsplit=1)
            remainder = parts[1] if len(parts) > 1 else ""
        return remainder


@dataclass(frozen=True)
class ChannelTextMessage(TextMessage):
    """Text said in a channel."""

    channel: str = ""


@dataclass(frozen=True)
class PrivateTextMessage(TextMessage):
    """Text sent directly to the bot."""


@dataclass(frozen=True)
class JoinEvent(Event):
    """Someone joined a channel. Not text-message capable."""

    source: str
    channel: str


def event_scope(event: Event) -> Optional[str]:
    """Return the channel an event belongs to, or None for global scope."""
    if isinstance(event, ChannelTextMessage):
        return event.channel
    return None


def reply_target(event: TextMessage) -> str:
    """Where replies go: the channel if public, the sender if private."""
    channel = event_scope(event)
    return channel if channel is not None else event.source
