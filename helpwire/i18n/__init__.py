"""Localized reply templates.

Catalogs are YAML files next to this module (``<locale>.yaml``).
Keys are dot-separated paths, e.g. ``help.no_help.command``.
"""

import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import structlog
import yaml

logger = structlog.get_logger("helpwire.modules")

DEFAULT_LOCALE = "en"

# IRC bold toggle
BOLD = "\x02"

_CATALOG_DIR = Path(__file__).parent


def _load_catalog(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class _Keep(dict):
    """format_map() mapping that leaves unknown placeholders untouched."""

    def __missing__(self, key):
        return "{" + key + "}"


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(f"{BOLD}{item}{BOLD}" for item in value)
    return str(value)


class Renderer:
    """Renders catalog templates with named variables.

    Args:
        locale: Catalog to use; unknown locales fall back to English.
        override: Optional YAML file merged over the bundled catalog.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE, override: Optional[Path] = None):
        path = _CATALOG_DIR / f"{locale}.yaml"
        if not path.is_file():
            logger.warning("locale_not_found", locale=locale, fallback=DEFAULT_LOCALE)
            locale = DEFAULT_LOCALE
            path = _CATALOG_DIR / f"{DEFAULT_LOCALE}.yaml"
        self.locale = locale
        self._strings: Dict[str, Any] = _load_catalog(path)
        if locale != DEFAULT_LOCALE:
            # Keys missing from a translation still render in English.
            self._strings = _merge(_load_catalog(_CATALOG_DIR / f"{DEFAULT_LOCALE}.yaml"), self._strings)
        if override is not None:
            self._strings = _merge(self._strings, _load_catalog(override))

    def template(self, key: str) -> Optional[str]:
        val: Any = self._strings
        for part in key.split("."):
            if not isinstance(val, dict):
                return None
            val = val.get(part)
            if val is None:
                return None
        return val if isinstance(val, str) else None

    def render(self, key: str, **variables: Any) -> str:
        """Render the template at ``key``.

        Unknown keys render as the key itself.
        """
        template = self.template(key)
        if template is None:
            logger.warning("template_not_found", key=key, locale=self.locale)
            return key
        template = template.replace("<b>", BOLD).replace("</b>", BOLD)
        values = _Keep({name: _format_value(v) for name, v in variables.items()})
        return template.format_map(values)


class Renderers:
    """Hands out the Renderer for a chat scope.

    Private messages and channels without a locale of their own use
    ``default_locale``. Renderers are built on first use and shared.

    Args:
        default_locale: Locale of the global scope.
        channel_locale: Returns a channel's own locale, or None.
        override_for: Returns the override catalog for a locale, or None.
    """

    def __init__(
        self,
        default_locale: str = DEFAULT_LOCALE,
        channel_locale: Optional[Callable[[str], Optional[str]]] = None,
        override_for: Optional[Callable[[str], Optional[Path]]] = None,
    ):
        self.default_locale = default_locale
        self._channel_locale = channel_locale or (lambda channel: None)
        self._override_for = override_for or (lambda locale: None)
        self._renderers: Dict[str, Renderer] = {}
        self._lock = threading.Lock()

    def for_locale(self, locale: str) -> Renderer:
        with self._lock:
            renderer = self._renderers.get(locale)
            if renderer is None:
                renderer = Renderer(locale, self._override_for(locale))
                self._renderers[locale] = renderer
            return renderer

    def for_scope(self, scope: Optional[str]) -> Renderer:
        """Renderer for a channel, or for private messages when ``scope`` is None."""
        locale = self._channel_locale(scope) if scope is not None else None
        return self.for_locale(locale or self.default_locale)

    @property
    def default(self) -> Renderer:
        return self.for_locale(self.default_locale)
