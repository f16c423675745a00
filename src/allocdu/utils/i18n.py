from __future__ import annotations

"""
Internationalization (i18n) Utility.

Provides a centralized singleton manager for the user-facing strings of the
CLI (help text and error messages). Implements dot-notation lookup for nested
JSON locale files and supports variable interpolation.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SYSTEM DEFAULTS
# -----------------------------------------------------------------------------

DEFAULT_LOCALE = "en"
LOCALE_ENV_VAR = "ALLOCDU_LANG"
LOCALES_REL_PATH = os.path.join("..", "interface", "locales")

# -----------------------------------------------------------------------------
# I18N MANAGER SERVICE
# -----------------------------------------------------------------------------

class I18n:
    """
    Resource manager for locale-specific string translations.

    Loads JSON resource files from the locale repository and resolves
    dotted keys, falling back to the English catalog and finally to the
    key itself.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        """
        Initialize the manager and attempt to load the requested locale.

        Args:
            locale: Standard ISO locale identifier (e.g., 'en', 'es').
        """
        self._locale = locale
        self._translations: Dict[str, Any] = {}
        self._fallback: Dict[str, Any] = {}
        self.is_loaded = False

        base_dir = os.path.dirname(os.path.abspath(__file__))
        self._locales_path = os.path.abspath(os.path.join(base_dir, LOCALES_REL_PATH))

        self._fallback = self._read_catalog(DEFAULT_LOCALE) or {}
        self.load_locale(locale)

    @property
    def locale(self) -> str:
        return self._locale

    def load_locale(self, locale: str) -> None:
        """
        Load a specific translation dictionary from the filesystem.

        Args:
            locale: ISO identifier for the target language.
        """
        catalog = self._read_catalog(locale)
        if catalog is None:
            self._translations = dict(self._fallback)
            self.is_loaded = bool(self._fallback)
            return

        self._translations = catalog
        self._locale = locale
        self.is_loaded = True
        logger.debug(f"I18n: loaded locale dictionary: {locale}")

    def t(self, key: str, default: Optional[str] = None, **kwargs: Any) -> str:
        """
        Resolve and format a translation string using dot-notation.

        Args:
            key: Hierarchical identifier path (e.g., 'cli.errors.no_dir').
            default: Text used when neither the active nor the fallback
                     catalog defines the key.
            **kwargs: Dynamic variables for string formatting.

        Returns:
            str: The translated and formatted string, or the default / key.
        """
        value = _lookup(self._translations, key)
        if value is None:
            value = _lookup(self._fallback, key)
        if value is None:
            value = default if default is not None else key

        if not kwargs:
            return value
        try:
            return value.format(**kwargs)
        except (KeyError, IndexError, ValueError) as e:
            logger.debug(f"I18n: interpolation error for '{key}': {e}")
            return value

    def _read_catalog(self, locale: str) -> Optional[Dict[str, Any]]:
        file_path = os.path.join(self._locales_path, f"{locale}.json")
        if not os.path.exists(file_path):
            logger.debug(f"I18n: locale resource missing at '{file_path}'")
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"I18n: unreadable locale file {file_path}: {e}")
            return None
        return data if isinstance(data, dict) else None


def detect_locale(environ: Optional[Dict[str, str]] = None) -> str:
    """
    Pick the UI language from ALLOCDU_LANG, then LANG (e.g. 'es_ES.UTF-8').
    """
    env = os.environ if environ is None else environ
    raw = env.get(LOCALE_ENV_VAR) or env.get("LANG") or DEFAULT_LOCALE
    code = raw.split(".")[0].split("_")[0].strip().lower()
    return code or DEFAULT_LOCALE


def _lookup(catalog: Dict[str, Any], key: str) -> Optional[str]:
    current: Any = catalog
    for part in key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current if isinstance(current, str) else None

# -----------------------------------------------------------------------------
# SERVICE INITIALIZATION
# -----------------------------------------------------------------------------

# Global singleton instance for application-wide resource access
i18n = I18n(detect_locale())
