"""Configuration management for helpwire.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a Config object. Property getters provide safe access with
defaults for the command prefix, locale, help callback timeout,
logging, per-module settings sections, and per-channel locales.

Key classes:
    Config: Central configuration manager.
    SettingsModel: pydantic schema used by Config.validate().

Key functions:
    get_config: Accessor for the process-wide Config instance.
"""

import os
from pathlib import Path
from typing import Dict, Optional

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

logger = structlog.get_logger("helpwire.modules")

DEFAULT_COMMAND_PREFIX = "!"
DEFAULT_PREFIX_MODE = "required"
DEFAULT_LOCALE = "en"
DEFAULT_CALLBACK_TIMEOUT = 10.0


class LoggingSettings(BaseModel):
    level: str = "INFO"
    subsystem_levels: Dict[str, str] = Field(default_factory=dict)
    max_file_size_mb: int = Field(default=10, ge=1, le=1024)
    backup_count: int = Field(default=5, ge=0, le=100)


class SettingsModel(BaseModel):
    """Schema of settings.yaml. Unknown keys are allowed."""

    command_prefix: str = Field(default=DEFAULT_COMMAND_PREFIX, max_length=4)
    prefix_mode: str = Field(
        default=DEFAULT_PREFIX_MODE, pattern="^(required|optional|none)$"
    )
    locale: str = DEFAULT_LOCALE
    callback_timeout: float = Field(default=DEFAULT_CALLBACK_TIMEOUT, gt=0, le=300)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    modules: Dict[str, dict] = Field(default_factory=dict)
    channels: Dict[str, dict] = Field(default_factory=dict)


class Config:
    """Central configuration manager for helpwire.

    Loads settings.yaml and .env from the config directory. Reads
    are safe from any thread; nothing mutates settings after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``$HELPWIRE_CONFIG_DIR`` or ``./config``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(os.environ.get("HELPWIRE_CONFIG_DIR", "config"))
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file.

        Raises:
            ConfigurationError: The file is not valid YAML or is not a mapping.
        """
        filepath = self.config_dir / filename
        if not filepath.exists():
            return {}
        with open(filepath, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Cannot parse {filename}", setting_name=filename, error=str(e)
                ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{filename} must contain a mapping",
                setting_name=filename,
                type=type(data).__name__,
            )
        return data

    def validate(self) -> bool:
        """Validate settings at startup.

        Logs each schema violation but does not raise; properties fall
        back to defaults for values they cannot use.

        Returns:
            True if settings.yaml matches the schema.
        """
        try:
            SettingsModel.model_validate(self.settings)
        except ValidationError as e:
            for err in e.errors():
                logger.error(
                    "config_invalid_value",
                    key=".".join(str(p) for p in err["loc"]),
                    error=err["msg"],
                )
            return False
        return True

    @property
    def command_prefix(self) -> str:
        """Command prefix ("!" by default). Env var HELPWIRE_COMMAND_PREFIX wins."""
        env = os.environ.get("HELPWIRE_COMMAND_PREFIX")
        if env is not None:
            return env
        return str(self.settings.get("command_prefix", DEFAULT_COMMAND_PREFIX))

    @property
    def prefix_mode(self) -> str:
        """Whether the command prefix is "required", "optional" or "none"."""
        mode = str(self.settings.get("prefix_mode", DEFAULT_PREFIX_MODE)).lower()
        if mode not in ("required", "optional", "none"):
            logger.warning("config_prefix_mode_unknown", value=mode)
            return DEFAULT_PREFIX_MODE
        return mode

    @property
    def locale(self) -> str:
        """Locale of user-visible replies. Env var HELPWIRE_LOCALE wins."""
        return os.environ.get("HELPWIRE_LOCALE") or self.settings.get("locale", DEFAULT_LOCALE)

    def channel_locale(self, channel: str) -> Optional[str]:
        """Locale set for one channel (channels.<channel>.locale), if any."""
        locale = self._section("channels", channel).get("locale")
        return str(locale) if locale else None

    def messages_file_for(self, locale: str) -> Optional[Path]:
        """Optional catalog override (config_dir/messages.<locale>.yaml)."""
        path = self.config_dir / f"messages.{locale}.yaml"
        return path if path.exists() else None

    @property
    def messages_file(self) -> Optional[Path]:
        return self.messages_file_for(self.locale)

    @property
    def callback_timeout(self) -> float:
        """Seconds a single help callback may run before it is cancelled."""
        value = self.settings.get("callback_timeout", DEFAULT_CALLBACK_TIMEOUT)
        try:
            value = float(value)
        except (TypeError, ValueError):
            logger.error("config_invalid_value", key="callback_timeout", value=value)
            return DEFAULT_CALLBACK_TIMEOUT
        return value if value > 0 else DEFAULT_CALLBACK_TIMEOUT

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return self.config_dir.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        return self.settings.get("logging", {}).get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        return self.settings.get("logging", {}).get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        return self.settings.get("logging", {}).get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        return self.settings.get("logging", {}).get("backup_count", 5)

    def _section(self, group: str, name: str) -> dict:
        """Return the <group>.<name> mapping, matching ``name`` case-insensitively."""
        entries = self.settings.get(group, {})
        if not isinstance(entries, dict):
            logger.error(f"{group}_section_invalid_type", type=type(entries).__name__)
            return {}
        for key, section in entries.items():
            if str(key).lower() == name.lower() and isinstance(section, dict):
                return section
        return {}

    def module_settings(self, module_name: str) -> dict:
        """Return the modules.<module_name> section (case-insensitive)."""
        return self._section("modules", module_name)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
