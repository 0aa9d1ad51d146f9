"""The Helper module's own help callback."""

from typing import Awaitable, Callable, List, Optional

from ..events import TextMessage, event_scope, reply_target
from ..i18n import Renderers
from .callbacks import HandlesHelpRequest, HelpResult
from .resolver import ModuleVisibility


class SelfHelpProvider(HandlesHelpRequest):
    """Answers "!help Helper" and "!help Helper help" (or a bare "!help").

    Args:
        own_name: Display name of the Helper module.
        get_trigger: Returns the trigger currently in use.
        prefix: Command prefix shown in usage banners.
        visibility: Provider of the active module names per scope.
        renderers: Reply template renderers per scope.
        send_message: Async (target, text) transport.
    """

    def __init__(
        self,
        own_name: str,
        get_trigger: Callable[[], str],
        prefix: str,
        visibility: ModuleVisibility,
        renderers: Renderers,
        send_message: Callable[[str, str], Awaitable[None]],
    ):
        self.own_name = own_name
        self.get_trigger = get_trigger
        self.prefix = prefix
        self.visibility = visibility
        self.renderers = renderers
        self.send_message = send_message

    async def __call__(self, event: TextMessage, words: List[Optional[str]]) -> HelpResult:
        scope = event_scope(event)
        target = reply_target(event)
        renderer = self.renderers.for_scope(scope)
        trigger = self.get_trigger()

        # "!help Helper"
        if len(words) == 1 and words[0] == self.own_name.lower():
            modules = self.visibility.list_active_modules(scope)
            msg = renderer.render(
                "help.usage.module",
                modules=modules,
                trigger=trigger,
                prefix=self.prefix,
            )
            await self.send_message(target, msg)
            return HelpResult.HANDLED

        if len(words) < 2 or words[1] != trigger:
            return HelpResult.NOT_HANDLED

        # "!help Helper help" or just "!help"
        msg = renderer.render(
            "help.usage.generic",
            this=self.own_name,
            trigger=trigger,
            prefix=self.prefix,
        )
        await self.send_message(target, msg)
        return HelpResult.HANDLED
