"""Tests for trigger matching and module-name resolution."""

from unittest.mock import MagicMock

import pytest

from helpwire.events import ChannelTextMessage, JoinEvent, PrivateTextMessage
from helpwire.help import (
    CallbackRegistry,
    ModuleNameResolver,
    PrefixMode,
    ResolutionStatus,
    TriggerMatcher,
    help_callback,
)
from helpwire.help.resolver import names_module


class TestTriggerMatcher:

    @pytest.mark.parametrize("text, expected", [
        ("!help", True),
        ("!help Weather", True),
        ("!help  forecast now", True),
        ("!helpme", False),
        ("!Help", False),
        ("help", False),
        (" !help", False),
        ("!!help", False),
    ])
    def test_required_prefix(self, text, expected):
        assert TriggerMatcher("help").matches_text(text) is expected

    def test_optional_prefix(self):
        matcher = TriggerMatcher("help", prefix_mode=PrefixMode.OPTIONAL)
        assert matcher.matches_text("help")
        assert matcher.matches_text("!help x")
        assert not matcher.matches_text("?help")

    def test_no_prefix(self):
        matcher = TriggerMatcher("help", prefix_mode="none")
        assert matcher.matches_text("help Weather")
        assert not matcher.matches_text("!help")

    def test_only_text_messages_match(self):
        matcher = TriggerMatcher("help")
        assert matcher.matches(PrivateTextMessage(source="a", text="!help"))
        assert matcher.matches(ChannelTextMessage(source="a", text="!help", channel="#c"))
        assert not matcher.matches(JoinEvent(source="a", channel="#c"))

    def test_tokenize(self):
        matcher = TriggerMatcher("help")
        assert matcher.tokenize("!help") == []
        assert matcher.tokenize("!help ") == []
        assert matcher.tokenize("!help  Weather \t forecast  ") == ["Weather", "forecast"]

    def test_wildcard(self):
        assert TriggerMatcher("aide").wildcard == "aide *"


def _make_resolver(active=("Helper", "Weather", "Silent"), registered=("helper", "weather")):
    registry = CallbackRegistry()
    for name in registered:
        registry.register(name, help_callback(lambda e, w: True))
    visibility = MagicMock()
    visibility.list_active_modules.return_value = list(active)
    return ModuleNameResolver(registry, visibility, "Helper"), visibility


class TestModuleNameResolver:

    def test_empty_request_targets_helper(self):
        resolver, _ = _make_resolver()
        resolution = resolver.resolve([], None, "help")
        assert resolution.ok
        assert resolution.target.module_id == "helper"
        assert resolution.target.words == ["help"]

    def test_empty_request_uses_current_trigger(self):
        resolver, _ = _make_resolver()
        assert resolver.resolve([], None, "aide").target.words == ["aide"]

    def test_uppercase_first_word_names_module(self):
        resolver, visibility = _make_resolver()
        resolution = resolver.resolve(["WeAther", "forecast"], "#chan", "help")
        assert resolution.status is ResolutionStatus.RESOLVED
        assert resolution.target.module_id == "weather"
        assert resolution.target.words == ["forecast"]
        visibility.list_active_modules.assert_called_once_with("#chan")

    def test_lowercase_first_word_is_a_command(self):
        resolver, visibility = _make_resolver()
        resolution = resolver.resolve(["weather"], None, "help")
        assert resolution.ok
        assert resolution.target.module_id is None
        assert resolution.target.words == ["weather"]
        visibility.list_active_modules.assert_not_called()

    def test_unknown_module(self):
        resolver, _ = _make_resolver()
        resolution = resolver.resolve(["Foo"], None, "help")
        assert resolution.status is ResolutionStatus.UNKNOWN_MODULE
        assert resolution.target.module_id == "foo"

    def test_active_module_without_callback(self):
        resolver, _ = _make_resolver()
        resolution = resolver.resolve(["Silent", "help"], None, "help")
        assert resolution.status is ResolutionStatus.NO_HELP_REGISTERED

    def test_registered_but_inactive_module_is_unknown(self):
        resolver, _ = _make_resolver(active=("Helper",))
        resolution = resolver.resolve(["Weather"], None, "help")
        assert resolution.status is ResolutionStatus.UNKNOWN_MODULE

    def test_input_list_not_modified(self):
        resolver, _ = _make_resolver()
        words = ["Weather", "forecast"]
        resolver.resolve(words, None, "help")
        assert words == ["Weather", "forecast"]

    @pytest.mark.parametrize("word, expected", [
        ("Weather", True),
        ("Éclair", True),
        ("weather", False),
        ("9lives", False),
        ("#chan", False),
        ("", False),
    ])
    def test_casing_rule(self, word, expected):
        assert names_module(word) is expected
