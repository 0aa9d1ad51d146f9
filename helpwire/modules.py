"""Bot module base class, module context, and scope visibility.

A module is an independently loaded feature unit. It is loaded either
globally or for a single channel; ModuleRegistry answers which modules
are active for a given scope (a channel, or None for the global and
private scope).
"""

from enum import IntFlag
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

import structlog

if TYPE_CHECKING:
    from .bus import EventBus
    from .config import Config
    from .help.callbacks import HandlesHelpRequest
    from .i18n import Renderer, Renderers
    from .triggers import TriggerRegistry

logger = structlog.get_logger("helpwire.modules")

# Name under which the help dispatcher module is loaded
HELPER_MODULE_NAME = "Helper"


class ReloadFlags(IntFlag):
    """What a call to BotModule.reload() must (re)do.

    INIT is set only on the first load; without it the module must
    release what the previous load acquired before acquiring again.
    """
    INIT = 1
    HANDLERS = 2
    ALL = INIT | HANDLERS


class ModuleContext:
    """Interface exposed to modules for interacting with the host.

    Modules receive this in their constructor and should never reach
    into the Bot object directly.
    """

    def __init__(
        self,
        module_name: str,
        send_message: Callable[[str, str], Awaitable[None]],
        config: "Config",
        renderers: "Renderers",
        bus: "EventBus",
        triggers: "TriggerRegistry",
        modules: "ModuleRegistry",
        channel: Optional[str] = None,
    ):
        self.module_name = module_name
        self._send_message = send_message
        self.config = config
        # Only expose the module's own config section
        self._module_settings = config.module_settings(module_name)
        self.renderers = renderers
        self.bus = bus
        self.triggers = triggers
        self.modules = modules
        self.channel = channel
        self.logger = structlog.get_logger("helpwire.modules").bind(module=module_name)

    @property
    def renderer(self) -> "Renderer":
        """Renderer for the scope the module is loaded in."""
        return self.renderers.for_scope(self.channel)

    def get_config(self, key: str, default: Any = None) -> Any:
        """Read modules.<module_name>.<key> from settings.yaml."""
        return self._module_settings.get(key, default)

    async def send_message(self, target: str, message: str) -> None:
        """Send an already rendered message to a channel or user."""
        await self._send_message(target, message)


class BotModule:
    """Base class for all bot modules.

    Subclass this and override reload() / unload() as needed.
    """

    name: str = ""
    description: str = ""

    def __init__(self, ctx: ModuleContext):
        self.ctx = ctx
        if not self.name:
            self.name = ctx.module_name

    def reload(self, flags: ReloadFlags) -> None:
        """Called when the module is loaded (INIT set) or reloaded."""

    def unload(self) -> None:
        """Called before the module is removed from its scope."""

    def register_help_method(self, callback: "HandlesHelpRequest") -> bool:
        """Register this module's help callback with the Helper module.

        Returns:
            False if no Helper module is loaded, True otherwise.

        Raises:
            InvalidCallbackSignature: If the callback does not accept
                text messages.
        """
        helper = self.ctx.modules.get(HELPER_MODULE_NAME)
        if helper is None:
            self.ctx.logger.info("help_registration_skipped", reason="no_helper")
            return False
        return helper.register_help_method(self, callback)

    async def send_message(self, target: str, key: str, **variables: Any) -> None:
        """Render a catalog template and send it to ``target``."""
        await self.ctx.send_message(target, self.ctx.renderer.render(key, **variables))


class ModuleRegistry:
    """Tracks which modules are active globally and per channel.

    Names are case-insensitive. Listing order is load order: channel
    modules first, then global modules the channel does not shadow.
    """

    def __init__(self):
        self._global: Dict[str, BotModule] = {}
        self._channels: Dict[str, Dict[str, BotModule]] = {}

    def _scope(self, channel: Optional[str], create: bool = False) -> Dict[str, BotModule]:
        if channel is None:
            return self._global
        key = channel.lower()
        if create:
            return self._channels.setdefault(key, {})
        return self._channels.get(key, {})

    def add(self, module: BotModule, channel: Optional[str] = None) -> None:
        scope = self._scope(channel, create=True)
        key = module.name.lower()
        if key in scope:
            logger.warning("module_replaced", module=module.name, channel=channel)
        scope[key] = module

    def remove(self, name: str, channel: Optional[str] = None) -> Optional[BotModule]:
        scope = self._scope(channel)
        module = scope.pop(name.lower(), None)
        if channel is not None and not scope:
            self._channels.pop(channel.lower(), None)
        return module

    def get(self, name: str, channel: Optional[str] = None) -> Optional[BotModule]:
        """Return the module visible as ``name`` from ``channel``."""
        key = name.lower()
        if channel is not None:
            module = self._scope(channel).get(key)
            if module is not None:
                return module
        return self._global.get(key)

    def modules(self, channel: Optional[str] = None) -> List[BotModule]:
        """Modules active in a scope, channel modules first."""
        merged = dict(self._scope(channel)) if channel is not None else {}
        for key, module in self._global.items():
            merged.setdefault(key, module)
        return list(merged.values())

    def list_active_modules(self, channel: Optional[str] = None) -> List[str]:
        """Names of the modules active in a scope, in listing order."""
        return [module.name for module in self.modules(channel)]
