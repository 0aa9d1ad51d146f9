"""Tests for the help callback registry and callback capability."""

import pytest

from helpwire.events import ChannelTextMessage, Event, PrivateTextMessage, TextMessage
from helpwire.exceptions import InvalidCallbackSignature
from helpwire.help import CallbackRegistry, HandlesHelpRequest, HelpResult, help_callback


def _cb(result=True):
    return help_callback(lambda event, words: result)


class TestCallbackRegistry:

    def test_lookup_is_case_insensitive(self):
        registry = CallbackRegistry()
        cb = _cb()
        registry.register("Weather", cb)
        assert registry.lookup("weather") is cb
        assert registry.lookup("WEATHER") is cb
        assert registry.lookup("other") is None
        assert registry.lookup(None) is None

    def test_last_registration_wins(self):
        registry = CallbackRegistry()
        first, second = _cb(), _cb(False)
        registry.register("weather", first)
        registry.register("Weather", second)
        assert registry.lookup("weather") is second
        assert len(registry) == 1

    def test_reregistering_same_callback_does_not_grow(self):
        registry = CallbackRegistry()
        cb = _cb()
        registry.register("weather", cb)
        registry.register("weather", cb)
        assert len(registry) == 1
        assert registry.lookup("weather") is cb

    def test_wrapping_same_function_twice_is_equivalent(self):
        def get_help(event, words):
            return True

        registry = CallbackRegistry()
        registry.register("weather", help_callback(get_help))
        registry.register("weather", help_callback(get_help))
        assert registry.lookup("weather") == help_callback(get_help)
        assert len(registry) == 1

    def test_insertion_order_kept_on_overwrite(self):
        registry = CallbackRegistry()
        for name in ("Zeta", "alpha", "Mid"):
            registry.register(name, _cb())
        registry.register("ZETA", _cb())
        assert registry.all_known_module_ids() == ["zeta", "alpha", "mid"]

    def test_invalid_callback_leaves_registry_unchanged(self):
        registry = CallbackRegistry()
        cb = _cb()
        registry.register("weather", cb)
        with pytest.raises(InvalidCallbackSignature) as exc_info:
            registry.register("weather", lambda event, words: True)
        assert exc_info.value.module_id == "weather"
        assert registry.lookup("weather") is cb

    def test_contains(self):
        registry = CallbackRegistry()
        registry.register("weather", _cb())
        assert "Weather" in registry
        assert "rain" not in registry
        assert 42 not in registry


class TestCallbacks:

    def test_coerce(self):
        assert HelpResult.coerce(True) is HelpResult.HANDLED
        assert HelpResult.coerce(None) is HelpResult.NOT_HANDLED
        assert HelpResult.coerce(HelpResult.NOT_HANDLED) is HelpResult.NOT_HANDLED
        assert not HelpResult.NOT_HANDLED
        assert HelpResult.HANDLED

    @pytest.mark.asyncio
    async def test_wraps_sync_and_async_functions(self):
        async def async_help(event, words):
            return words[0] == "weather"

        event = PrivateTextMessage(source="alice", text="!help Weather")
        assert await help_callback(lambda e, w: 1)(event, [None]) is HelpResult.HANDLED
        assert await help_callback(async_help)(event, ["weather"]) is HelpResult.HANDLED
        assert await help_callback(async_help)(event, [None]) is HelpResult.NOT_HANDLED

    def test_decorator_with_event_type(self):
        @help_callback(event_type=ChannelTextMessage)
        def channel_only(event, words):
            return True

        assert isinstance(channel_only, HandlesHelpRequest)
        assert channel_only.event_type is ChannelTextMessage
        assert channel_only.__name__ == "channel_only"
        CallbackRegistry().register("chan", channel_only)

    def test_wrapping_a_callback_returns_it(self):
        cb = _cb()
        assert help_callback(cb) is cb

    def test_non_text_event_type_rejected(self):
        registry = CallbackRegistry()
        with pytest.raises(InvalidCallbackSignature):
            registry.register("join", help_callback(lambda e, w: True, event_type=Event))
        with pytest.raises(InvalidCallbackSignature):
            registry.register("join", help_callback(lambda e, w: True, event_type=str))
        assert len(registry) == 0

    def test_subclass_implementation_accepted(self):
        class WeatherHelp(HandlesHelpRequest):
            event_type = TextMessage

            async def __call__(self, event, words):
                return HelpResult.HANDLED

        registry = CallbackRegistry()
        registry.register("weather", WeatherHelp())
        assert isinstance(registry.lookup("weather"), WeatherHelp)
