from __future__ import annotations

"""
Internationalization (i18n) utility module for user-facing messages.

Every message the client shows to a user (translated errors, session notices)
is looked up here by key. Catalogs live in
``marketplace_client/locales/<lang>/LC_MESSAGES/messages.po`` and are parsed
with Babel on first use, so no compilation step is needed.

Lookup falls back to the default language and finally to the key itself.
"""

import os
from typing import Dict, Optional

from babel.messages.pofile import read_po

from marketplace_client.core.config.settings import settings
from marketplace_client.core.logging import logger

_catalogs: Dict[str, Dict[str, str]] = {}

LOCALES_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "locales"))


def setup_i18n(locales_path: Optional[str] = None) -> None:
    """
    Load the message catalog of every supported language.

    Args:
        locales_path: Directory holding ``<lang>/LC_MESSAGES/messages.po``
            files; defaults to the catalogs shipped with the package.

    Raises:
        FileNotFoundError: If the locales directory is not found.
    """
    path = locales_path or LOCALES_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Locales directory not found: {path}")

    _catalogs.clear()
    for lang in settings.SUPPORTED_LANGUAGES:
        po_path = os.path.join(path, lang, "LC_MESSAGES", "messages.po")
        catalog: Dict[str, str] = {}
        if os.path.exists(po_path):
            with open(po_path, "rb") as po_file:
                for message in read_po(po_file, locale=lang):
                    if message.id and isinstance(message.id, str):
                        catalog[message.id] = message.string or message.id
        else:
            logger.warning("i18n_catalog_missing", lang=lang, path=po_path)
        _catalogs[lang] = catalog
        logger.debug("i18n_initialized", language=lang, entries=len(catalog))


def get_translated_message(key: str, locale: Optional[str] = None, **params: object) -> str:
    """
    Retrieve a translated message for the given key and locale.

    Args:
        key: The message key to translate.
        locale: The target language code (defaults to DEFAULT_LANGUAGE).
        **params: Values interpolated into ``{name}`` placeholders.

    Returns:
        The translated message, the default-language message, or the key.
    """
    if not _catalogs:
        setup_i18n()

    locale = locale or settings.DEFAULT_LANGUAGE
    if locale not in _catalogs:
        logger.warning("unsupported_locale_requested", requested_locale=locale,
                       fallback_locale=settings.DEFAULT_LANGUAGE)
        locale = settings.DEFAULT_LANGUAGE

    translated = _catalogs.get(locale, {}).get(key)
    if translated is None:
        translated = _catalogs.get(settings.DEFAULT_LANGUAGE, {}).get(key)
    if translated is None:
        logger.warning("translation_key_not_found", key=key, locale=locale)
        translated = key

    if params:
        try:
            translated = translated.format(**params)
        except (KeyError, IndexError, ValueError):
            logger.warning("translation_format_failed", key=key, locale=locale)
    return translated
