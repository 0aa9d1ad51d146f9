"""Callback registry: module identifier -> help callback."""

import threading
from typing import Dict, List, Optional

import structlog

from .callbacks import HandlesHelpRequest, validate_callback

logger = structlog.get_logger("helpwire.dispatch")


def normalize_module_id(module_id: str) -> str:
    return module_id.lower()


class CallbackRegistry:
    """Maps normalized (lower-cased) module identifiers to help callbacks.

    Registering an identifier twice replaces the callback but keeps the
    identifier's original position in all_known_module_ids(). There is
    no unregister: entries live as long as the registry.

    The lock is held only inside each method, never while a callback
    runs, so callbacks may re-register freely.
    """

    def __init__(self):
        self._callbacks: Dict[str, HandlesHelpRequest] = {}
        self._lock = threading.Lock()

    def register(self, module_id: str, callback: HandlesHelpRequest) -> None:
        """Store ``callback`` as the help callback for ``module_id``.

        Raises:
            InvalidCallbackSignature: The callback cannot accept text
                messages. The registry is left unchanged.
        """
        key = normalize_module_id(module_id)
        validate_callback(callback, module_id=key)
        with self._lock:
            replaced = key in self._callbacks
            self._callbacks[key] = callback
        logger.debug("help_callback_registered", module_id=key, replaced=replaced)

    def lookup(self, module_id: Optional[str]) -> Optional[HandlesHelpRequest]:
        if module_id is None:
            return None
        with self._lock:
            return self._callbacks.get(normalize_module_id(module_id))

    def all_known_module_ids(self) -> List[str]:
        """Registered identifiers in registration order."""
        with self._lock:
            return list(self._callbacks)

    def __contains__(self, module_id: object) -> bool:
        return isinstance(module_id, str) and self.lookup(module_id) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)
