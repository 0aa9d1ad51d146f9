"""The Helper module.

Other modules register a help callback with it; it listens for the
help trigger and routes each request to the right callback.
"""

import threading
from typing import Optional, Union

from ..bus import EventHandler
from ..events import Event, TextMessage
from ..exceptions import TriggerAcquisitionFailed
from ..modules import HELPER_MODULE_NAME, BotModule, ModuleContext, ReloadFlags
from ..triggers import MATCH_ANY
from .callbacks import HandlesHelpRequest
from .dispatcher import HelpDispatcher
from .matcher import PrefixMode, TriggerMatcher
from .registry import CallbackRegistry
from .resolver import ModuleNameResolver
from .self_help import SelfHelpProvider

DEFAULT_TRIGGER = "help"


class Helper(BotModule):
    """Help request dispatcher module.

    Settings (``modules.Helper`` in settings.yaml):
        trigger: Help command word (default "help").
    """

    name = HELPER_MODULE_NAME
    description = "Routes help requests to the modules that can answer them."

    def __init__(self, ctx: ModuleContext):
        super().__init__(ctx)
        config = ctx.config
        self.prefix_mode = PrefixMode(config.prefix_mode)
        self.prefix = "" if self.prefix_mode is PrefixMode.NONE else config.command_prefix

        self.registry = CallbackRegistry()
        self.resolver = ModuleNameResolver(self.registry, ctx.modules, self.name)
        self.self_help = SelfHelpProvider(
            own_name=self.name,
            get_trigger=lambda: self.trigger,
            prefix=self.prefix,
            visibility=ctx.modules,
            renderers=ctx.renderers,
            send_message=ctx.send_message,
        )
        self.dispatcher = HelpDispatcher(
            registry=self.registry,
            resolver=self.resolver,
            visibility=ctx.modules,
            renderers=ctx.renderers,
            send_message=ctx.send_message,
            callback_timeout=config.callback_timeout,
        )

        self._matcher: Optional[TriggerMatcher] = None
        self._trigger_handle: Optional[str] = None
        self._handler: Optional[EventHandler] = None
        self._swap_lock = threading.Lock()

    @property
    def trigger(self) -> Optional[str]:
        matcher = self._matcher
        return matcher.trigger if matcher is not None else None

    # --- Lifecycle ---

    def reload(self, flags: ReloadFlags) -> None:
        if not flags & ReloadFlags.INIT:
            self._release()

        if flags & ReloadFlags.HANDLERS:
            trigger = str(self.ctx.get_config("trigger", DEFAULT_TRIGGER))
            with self._swap_lock:
                self._acquire(trigger)
            self._handler = self.ctx.bus.add_handler(EventHandler(
                callback=self.handle_help,
                predicate=self._is_help_request,
                description="helper:help",
            ))
            # The Helper is not in the module registry yet, so its own
            # callback is registered directly.
            self.registry.register(self.name, self.self_help)

    def unload(self) -> None:
        self._release()

    def _acquire(self, trigger: str) -> None:
        handle = self.ctx.triggers.register_triggers(trigger, MATCH_ANY)
        if handle is None:
            raise TriggerAcquisitionFailed(
                self.ctx.renderer.render("help.errors.trigger"),
                trigger=trigger,
                module=self.name,
            )
        self._trigger_handle = handle
        self._matcher = TriggerMatcher(trigger, self.prefix, self.prefix_mode)
        self.ctx.logger.info("help_trigger_active", trigger=trigger)

    def _release(self) -> None:
        if self._handler is not None:
            self.ctx.bus.remove_handler(self._handler)
            self._handler = None
        with self._swap_lock:
            if self._trigger_handle is not None:
                self.ctx.triggers.free_triggers(self._trigger_handle, MATCH_ANY)
                self._trigger_handle = None
            self._matcher = None

    def set_trigger(self, trigger: str) -> None:
        """Replace the help trigger.

        The old reservation is freed, then the new one is requested. If
        the new one is refused, the old trigger is reserved again and
        TriggerAcquisitionFailed is raised for the new trigger. Should
        the old trigger have been taken in between, the Helper is left
        without a trigger and stops answering until a later
        set_trigger() or reload succeeds.
        """
        with self._swap_lock:
            old_matcher = self._matcher
            if old_matcher is not None and old_matcher.trigger == trigger:
                return
            if self._trigger_handle is not None:
                self.ctx.triggers.free_triggers(self._trigger_handle, MATCH_ANY)
                self._trigger_handle = None
            try:
                self._acquire(trigger)
            except TriggerAcquisitionFailed as e:
                if old_matcher is not None:
                    try:
                        self._acquire(old_matcher.trigger)
                    except TriggerAcquisitionFailed:
                        self._matcher = None
                        self.ctx.logger.error(
                            "help_trigger_lost", trigger=old_matcher.trigger
                        )
                raise e

    # --- Registration ---

    def register_help_method(
        self, module: Union[BotModule, str], callback: HandlesHelpRequest
    ) -> bool:
        """Register ``callback`` as the help callback of ``module``.

        Raises:
            InvalidCallbackSignature: If the callback cannot accept
                text messages.
        """
        module_name = module if isinstance(module, str) else module.name
        self.registry.register(module_name, callback)
        self.ctx.logger.info("help_method_registered", for_module=module_name)
        return True

    # --- Event handling ---

    def _is_help_request(self, event: Event) -> bool:
        matcher = self._matcher
        return matcher is not None and matcher.matches(event)

    async def handle_help(self, event: TextMessage) -> None:
        # One snapshot per request, so a concurrent set_trigger() cannot
        # split tokenizing and dispatch across two triggers.
        matcher = self._matcher
        if matcher is None:
            return
        tokens = matcher.tokenize(event.text)
        await self.dispatcher.dispatch(event, tokens, matcher.trigger)
