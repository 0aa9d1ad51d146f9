"""Shared fixtures: a Bot with the Helper loaded and a mocked transport."""

from unittest.mock import AsyncMock

import pytest
import yaml

from helpwire.bot import Bot
from helpwire.config import Config
from helpwire.help import Helper


def write_settings(config_dir, settings):
    (config_dir / "settings.yaml").write_text(yaml.safe_dump(settings))
    return Config(config_dir)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("HELPWIRE_COMMAND_PREFIX", "HELPWIRE_LOCALE", "HELPWIRE_CONFIG_DIR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config(tmp_path):
    return write_settings(tmp_path, {"log_dir": str(tmp_path / "logs")})


@pytest.fixture
def sent():
    return AsyncMock()


@pytest.fixture
def bot(config, sent):
    bot = Bot(config, send_message=sent)
    bot.load_module(Helper, strict=True)
    return bot
