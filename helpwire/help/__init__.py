"""Help request dispatching.

Modules register a help callback with the Helper module; "!help ..."
messages are routed to those callbacks.
"""

from .callbacks import HandlesHelpRequest, HelpResult, help_callback, validate_callback
from .dispatcher import DispatchOutcome, HelpDispatcher
from .helper import Helper
from .matcher import PrefixMode, TriggerMatcher
from .registry import CallbackRegistry
from .resolver import ModuleNameResolver, ResolvedTarget, ResolutionStatus
from .self_help import SelfHelpProvider

__all__ = [
    "CallbackRegistry",
    "DispatchOutcome",
    "HandlesHelpRequest",
    "HelpDispatcher",
    "HelpResult",
    "Helper",
    "ModuleNameResolver",
    "PrefixMode",
    "ResolutionStatus",
    "ResolvedTarget",
    "SelfHelpProvider",
    "TriggerMatcher",
    "help_callback",
    "validate_callback",
]
