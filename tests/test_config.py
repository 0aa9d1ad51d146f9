"""Tests for configuration, reply rendering and logging helpers."""

from pathlib import Path

import pytest

from conftest import write_settings
from helpwire.config import Config
from helpwire.exceptions import ConfigurationError
from helpwire.i18n import BOLD, Renderer, Renderers
from helpwire.logging_config import mask_sources


class TestConfig:

    def test_defaults_without_settings(self, tmp_path):
        config = Config(tmp_path)
        assert config.settings == {}
        assert config.command_prefix == "!"
        assert config.prefix_mode == "required"
        assert config.locale == "en"
        assert config.callback_timeout == 10.0
        assert config.log_dir == tmp_path.parent / "logs"
        assert config.messages_file is None
        assert config.validate() is True

    def test_env_overrides_prefix(self, tmp_path, monkeypatch):
        config = write_settings(tmp_path, {"command_prefix": "?"})
        assert config.command_prefix == "?"
        monkeypatch.setenv("HELPWIRE_COMMAND_PREFIX", ".")
        assert config.command_prefix == "."

    def test_dotenv_file_loaded(self, tmp_path):
        (tmp_path / ".env").write_text("HELPWIRE_LOCALE=fr\n")
        assert Config(tmp_path).locale == "fr"

    def test_invalid_values_fall_back(self, tmp_path):
        config = write_settings(tmp_path, {
            "prefix_mode": "sometimes",
            "callback_timeout": "soon",
        })
        assert config.prefix_mode == "required"
        assert config.callback_timeout == 10.0
        assert config.validate() is False

    def test_module_settings_case_insensitive(self, tmp_path):
        config = write_settings(tmp_path, {"modules": {"helper": {"trigger": "aide"}}})
        assert config.module_settings("Helper") == {"trigger": "aide"}
        assert config.module_settings("Weather") == {}

    def test_module_settings_wrong_type(self, tmp_path):
        config = write_settings(tmp_path, {"modules": ["Helper"]})
        assert config.module_settings("Helper") == {}

    def test_channel_locale(self, tmp_path):
        config = write_settings(tmp_path, {"channels": {"#FR": {"locale": "fr"}, "#x": {}}})
        assert config.channel_locale("#fr") == "fr"
        assert config.channel_locale("#x") is None
        assert config.channel_locale("#lobby") is None

    def test_malformed_yaml_raises(self, tmp_path):
        (tmp_path / "settings.yaml").write_text("locale: [en\n")
        with pytest.raises(ConfigurationError) as exc_info:
            Config(tmp_path)
        assert exc_info.value.setting_name == "settings.yaml"

    def test_non_mapping_yaml_raises(self, tmp_path):
        (tmp_path / "settings.yaml").write_text("- en\n- fr\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            Config(tmp_path)


class TestRenderer:

    def test_render_scalar_and_list(self):
        renderer = Renderer("en")
        assert renderer.render("help.no_such_module", module="foo") == (
            f"No such module {BOLD}foo{BOLD}."
        )
        usage = renderer.render(
            "help.usage.module", modules=["Helper", "Weather"], trigger="help", prefix="!"
        )
        assert usage.endswith(f"loaded: {BOLD}Helper{BOLD}, {BOLD}Weather{BOLD}.")

    def test_unknown_key_renders_key(self):
        assert Renderer().render("help.nope") == "help.nope"
        assert Renderer().render("help.usage") == "help.usage"

    def test_missing_variable_kept(self):
        assert Renderer().render("help.no_help.module") == (
            f"No help available on module {BOLD}{{module}}{BOLD}."
        )

    def test_french_catalog(self):
        renderer = Renderer("fr")
        assert renderer.locale == "fr"
        assert renderer.render("help.no_such_module", module="foo").startswith("Aucun module")

    def test_unknown_locale_falls_back_to_english(self):
        renderer = Renderer("xx")
        assert renderer.locale == "en"
        assert renderer.render("help.no_help.command", command="x").startswith("No help")

    def test_override_file(self, tmp_path):
        override = tmp_path / "messages.en.yaml"
        override.write_text("help:\n  no_such_module: Never heard of {module}\n")
        renderer = Renderer("en", override)
        assert renderer.render("help.no_such_module", module="foo") == "Never heard of foo"
        assert renderer.render("help.no_help.module", module="x").startswith("No help")

    def test_config_points_at_override(self, tmp_path):
        (tmp_path / "messages.en.yaml").write_text("help: {}\n")
        assert Config(tmp_path).messages_file == Path(tmp_path) / "messages.en.yaml"


class TestRenderers:

    def test_scope_picks_channel_locale(self):
        renderers = Renderers("en", channel_locale={"#fr": "fr"}.get)
        assert renderers.for_scope("#fr").locale == "fr"
        assert renderers.for_scope("#lobby").locale == "en"
        assert renderers.for_scope(None) is renderers.default
        assert renderers.for_scope("#fr") is renderers.for_locale("fr")

    def test_override_per_locale(self, tmp_path):
        (tmp_path / "messages.fr.yaml").write_text("help:\n  no_such_module: Inconnu {module}\n")
        config = write_settings(tmp_path, {"channels": {"#fr": {"locale": "fr"}}})
        renderers = Renderers(
            config.locale,
            channel_locale=config.channel_locale,
            override_for=config.messages_file_for,
        )
        assert renderers.for_scope("#fr").render("help.no_such_module", module="x") == "Inconnu x"
        assert renderers.for_scope(None).render("help.no_such_module", module="x") == (
            f"No such module {BOLD}x{BOLD}."
        )


@pytest.mark.parametrize("value, expected", [
    ("alice", "alice"),
    ("#a-very-long-channel-name", "#a-very-long-channel-name"),
    ("+15551234567890123", "...0123"),
])
def test_mask_sources(value, expected):
    event = mask_sources(None, "info", {"source": value, "other": value})
    assert event["source"] == expected
    assert event["other"] == value
