"""Bot host for helpwire.

Owns the event bus, trigger registry, module registry and reply
renderers, creates a ModuleContext for each loaded module, and turns
incoming lines of text into events.

Key classes:
    Bot: Module lifecycle and message intake.
"""

from typing import Awaitable, Callable, Optional, Type

import structlog

from .bus import EventBus
from .config import Config, get_config
from .events import ChannelTextMessage, PrivateTextMessage, TextMessage
from .exceptions import ModuleLoadError
from .i18n import Renderers
from .modules import HELPER_MODULE_NAME, BotModule, ModuleContext, ModuleRegistry, ReloadFlags
from .triggers import TriggerRegistry

logger = structlog.get_logger("helpwire.modules")


class Bot:
    """Hosts bot modules and feeds them incoming messages.

    Args:
        config: Configuration; the global one if omitted.
        send_message: Async (target, text) transport for replies.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        send_message: Optional[Callable[[str, str], Awaitable[None]]] = None,
    ):
        self.config = config or get_config()
        self._send = send_message
        self.bus = EventBus()
        self.triggers = TriggerRegistry()
        self.modules = ModuleRegistry()
        self.renderers = Renderers(
            self.config.locale,
            channel_locale=self.config.channel_locale,
            override_for=self.config.messages_file_for,
        )

    async def _send_message(self, target: str, message: str) -> None:
        if self._send is None:
            logger.info("reply_dropped_no_transport", target=target)
            return
        await self._send(target, message)

    # --- Module lifecycle ---

    def load_module(
        self,
        module_cls: Type[BotModule],
        channel: Optional[str] = None,
        strict: bool = False,
    ) -> Optional[BotModule]:
        """Instantiate and initialize a module, then make it active.

        A module whose initialization raises is not activated. The
        failure is logged, and re-raised as ModuleLoadError when
        ``strict`` is set.
        """
        name = module_cls.name or module_cls.__name__
        ctx = ModuleContext(
            module_name=name,
            send_message=self._send_message,
            config=self.config,
            renderers=self.renderers,
            bus=self.bus,
            triggers=self.triggers,
            modules=self.modules,
            channel=channel,
        )
        try:
            module = module_cls(ctx)
            module.reload(ReloadFlags.ALL)
        except Exception as e:
            logger.error(
                "module_load_failed",
                module=name,
                channel=channel,
                error=str(e),
                error_type=type(e).__name__,
            )
            if strict:
                raise ModuleLoadError(
                    f"Module {name} failed to initialize", module_name=name
                ) from e
            return None

        self.modules.add(module, channel)
        logger.info("module_loaded", module=name, channel=channel)
        return module

    def reload_module(self, name: str, channel: Optional[str] = None) -> bool:
        """Re-run a loaded module's handler setup."""
        module = self.modules.get(name, channel)
        if module is None:
            return False
        module.reload(ReloadFlags.HANDLERS)
        logger.info("module_reloaded", module=module.name, channel=channel)
        return True

    def unload_module(self, name: str, channel: Optional[str] = None) -> bool:
        module = self.modules.remove(name, channel)
        if module is None:
            logger.warning("module_not_loaded", module=name, channel=channel)
            return False
        try:
            module.unload()
        except Exception as e:
            logger.error(
                "module_unload_failed",
                module=module.name,
                error=str(e),
                error_type=type(e).__name__,
            )
        logger.info("module_unloaded", module=module.name, channel=channel)
        return True

    @property
    def helper(self):
        return self.modules.get(HELPER_MODULE_NAME)

    # --- Message intake ---

    async def handle_text(
        self, source: str, text: str, channel: Optional[str] = None
    ) -> TextMessage:
        """Turn a line of text into an event and dispatch it."""
        if channel is None:
            event: TextMessage = PrivateTextMessage(source=source, text=text)
        else:
            event = ChannelTextMessage(source=source, text=text, channel=channel)
        await self.bus.dispatch(event)
        return event
