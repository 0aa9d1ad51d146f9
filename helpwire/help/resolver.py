"""Decides which module a help request is addressed to.

Parsing rule: a first word starting with an uppercase letter names a
module ("!help Weather forecast"); anything else is a command name
asked of every active module ("!help forecast"). Module names are
otherwise case-insensitive.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from .registry import CallbackRegistry, normalize_module_id


class ModuleVisibility(Protocol):
    def list_active_modules(self, channel: Optional[str] = None) -> List[str]:
        ...


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    UNKNOWN_MODULE = "unknown_module"
    NO_HELP_REGISTERED = "no_help_registered"


@dataclass(frozen=True)
class ResolvedTarget:
    """Module the request is addressed to (None: every active module),
    and the words left after the module name."""
    module_id: Optional[str]
    words: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    target: ResolvedTarget

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED


def names_module(word: str) -> bool:
    """Whether ``word`` is a module name by the casing rule."""
    return bool(word) and word[0].isupper()


class ModuleNameResolver:
    """Turns the words of a help request into a ResolvedTarget.

    Args:
        registry: Help callbacks known so far.
        visibility: Provider of the active module names per scope.
        own_name: Name of the module answering bare help requests.
    """

    def __init__(self, registry: CallbackRegistry, visibility: ModuleVisibility, own_name: str):
        self.registry = registry
        self.visibility = visibility
        self.own_name = own_name

    def resolve(self, words: List[str], scope: Optional[str], trigger: str) -> Resolution:
        words = list(words)
        # A bare trigger asks the helper about itself.
        if not words:
            # Current trigger, not a literal "help", so a renamed trigger still works.
            words = [self.own_name, trigger]

        module_id = None
        if names_module(words[0]):
            module_id = normalize_module_id(words.pop(0))

        target = ResolvedTarget(module_id=module_id, words=words)
        if module_id is None:
            return Resolution(ResolutionStatus.RESOLVED, target)

        active = {normalize_module_id(n) for n in self.visibility.list_active_modules(scope)}
        if module_id not in active:
            return Resolution(ResolutionStatus.UNKNOWN_MODULE, target)
        if self.registry.lookup(module_id) is None:
            return Resolution(ResolutionStatus.NO_HELP_REGISTERED, target)
        return Resolution(ResolutionStatus.RESOLVED, target)
