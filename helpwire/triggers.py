"""Trigger allocator.

Command words ("triggers") are reserved by modules so two modules
never answer the same command. A reservation is made either for one
channel or for every channel (MATCH_ANY); collisions are checked
case-insensitively against everything visible from that channel.
"""

from itertools import count
from typing import Dict, Iterable, List, Optional, Union

import structlog

logger = structlog.get_logger("helpwire.triggers")


class _MatchAny:
    """Sentinel scope: a reservation valid in every channel."""

    def __repr__(self) -> str:
        return "MATCH_ANY"


MATCH_ANY = _MatchAny()

Scope = Union[str, _MatchAny]


class TriggerRegistry:
    """Reserves command triggers and detects collisions across modules."""

    def __init__(self):
        # scope -> handle -> reserved tokens (lower-cased)
        self._reservations: Dict[Scope, Dict[str, List[str]]] = {}
        self._handles = count(1)

    def _visible_tokens(self, channel: Scope) -> set:
        scopes = self._reservations.keys() if channel is MATCH_ANY else (channel, MATCH_ANY)
        tokens = set()
        for scope in scopes:
            for reserved in self._reservations.get(scope, {}).values():
                tokens.update(reserved)
        return tokens

    def register_triggers(
        self, triggers: Union[str, Iterable[str]], channel: Scope = MATCH_ANY
    ) -> Optional[str]:
        """Reserve one or more triggers.

        Args:
            triggers: A single token or several tokens.
            channel: Channel the reservation applies to, or MATCH_ANY.

        Returns:
            An opaque handle for free_triggers(), or None if any token
            is already reserved in a scope visible from ``channel``.
        """
        if isinstance(triggers, str):
            triggers = [triggers]
        tokens = [t.lower() for t in triggers]
        # A trigger is a single word.
        if not tokens or any(t.split() != [t] for t in tokens):
            logger.warning("trigger_invalid", triggers=tokens)
            return None

        label = repr(channel) if channel is MATCH_ANY else channel
        taken = self._visible_tokens(channel).intersection(tokens)
        if taken:
            logger.warning("trigger_collision", triggers=sorted(taken), channel=label)
            return None

        handle = f"{label}:{next(self._handles)}"
        self._reservations.setdefault(channel, {})[handle] = tokens
        logger.info("trigger_registered", triggers=tokens, handle=handle)
        return handle

    def free_triggers(self, handle: str, channel: Scope = MATCH_ANY) -> None:
        """Release a reservation made by register_triggers().

        Raises:
            ValueError: If ``handle`` is not reserved in ``channel``.
        """
        scope = self._reservations.get(channel, {})
        if handle not in scope:
            raise ValueError(f"No such trigger reservation: {handle}")
        tokens = scope.pop(handle)
        if not scope:
            self._reservations.pop(channel, None)
        logger.info("trigger_freed", triggers=tokens, handle=handle)

    def get_triggers(self, channel: Scope = MATCH_ANY) -> List[str]:
        """List the tokens reserved in ``channel`` (and globally)."""
        return sorted(self._visible_tokens(channel))

    def contains_trigger(self, token: str, channel: Scope = MATCH_ANY) -> bool:
        return token.lower() in self._visible_tokens(channel)
