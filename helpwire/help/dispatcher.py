"""Dispatch engine: walks candidate help callbacks until one answers."""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import structlog

from ..events import TextMessage, event_scope, reply_target
from ..i18n import Renderers
from .callbacks import HandlesHelpRequest, HelpResult
from .registry import CallbackRegistry, normalize_module_id
from .resolver import ModuleNameResolver, ModuleVisibility, ResolutionStatus

logger = structlog.get_logger("helpwire.dispatch")


class DispatchOutcome(str, Enum):
    HANDLED = "handled"
    UNKNOWN_MODULE = "unknown_module"
    NO_HELP_MODULE = "no_help_module"
    NO_HELP_COMMAND = "no_help_command"


class HelpDispatcher:
    """Routes a tokenized help request to the right help callback.

    A request naming a module goes to that module's callback only. A
    request naming a command is offered to the callbacks of every
    module active in the request's scope, in registration order,
    until one returns HANDLED. If none does, a "no help available"
    reply is sent.

    Each callback gets ``callback_timeout`` seconds. A callback that
    times out or raises counts as NOT_HANDLED and the next candidate
    is tried.
    """

    def __init__(
        self,
        registry: CallbackRegistry,
        resolver: ModuleNameResolver,
        visibility: ModuleVisibility,
        renderers: Renderers,
        send_message: Callable[[str, str], Awaitable[None]],
        callback_timeout: Optional[float] = 10.0,
    ):
        self.registry = registry
        self.resolver = resolver
        self.visibility = visibility
        self.renderers = renderers
        self.send_message = send_message
        self.callback_timeout = callback_timeout

    def candidates(self, module_id: Optional[str], scope: Optional[str]) -> List[str]:
        """Module identifiers to query, in query order."""
        if module_id is not None:
            return [module_id]
        active = {normalize_module_id(n) for n in self.visibility.list_active_modules(scope)}
        return [m for m in self.registry.all_known_module_ids() if m in active]

    async def _invoke(
        self,
        module_id: str,
        callback: HandlesHelpRequest,
        event: TextMessage,
        words: List[Optional[str]],
    ) -> HelpResult:
        try:
            result = await asyncio.wait_for(callback(event, words), self.callback_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "help_callback_timeout",
                module_id=module_id,
                timeout=self.callback_timeout,
            )
            return HelpResult.NOT_HANDLED
        except Exception as e:
            logger.error(
                "help_callback_failed",
                module_id=module_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return HelpResult.NOT_HANDLED
        return HelpResult.coerce(result)

    async def dispatch(self, event: TextMessage, tokens: List[str], trigger: str) -> DispatchOutcome:
        """Answer one help request.

        Args:
            event: The message that invoked the trigger.
            tokens: Words following the trigger.
            trigger: Trigger in use when the message matched.
        """
        scope = event_scope(event)
        target = reply_target(event)
        renderer = self.renderers.for_scope(scope)

        resolution = self.resolver.resolve(tokens, scope, trigger)
        module_id = resolution.target.module_id

        if resolution.status is ResolutionStatus.UNKNOWN_MODULE:
            logger.info("help_unknown_module", module_id=module_id, channel=scope)
            await self.send_message(
                target, renderer.render("help.no_such_module", module=module_id)
            )
            return DispatchOutcome.UNKNOWN_MODULE

        if resolution.status is ResolutionStatus.NO_HELP_REGISTERED:
            logger.info("help_no_callback", module_id=module_id, channel=scope)
            await self.send_message(
                target, renderer.render("help.no_help.module", module=module_id)
            )
            return DispatchOutcome.NO_HELP_MODULE

        # The addressed module (None when broadcasting) always leads the
        # words handed to callbacks.
        words = [module_id] + resolution.target.words

        for candidate in self.candidates(module_id, scope):
            callback = self.registry.lookup(candidate)
            if callback is None:
                continue
            result = await self._invoke(candidate, callback, event, list(words))
            if result is HelpResult.HANDLED:
                logger.info(
                    "help_dispatch_handled",
                    module_id=candidate,
                    broadcast=module_id is None,
                    source=event.source,
                )
                return DispatchOutcome.HANDLED

        command = event.tokens(1)
        logger.info("help_no_handler", command=command, channel=scope)
        await self.send_message(
            target, renderer.render("help.no_help.command", command=command)
        )
        return DispatchOutcome.NO_HELP_COMMAND
