"""
Keyed text lookups for labels, hints and button captions.

Keys are dotted paths such as ``simple_form.hints.user.name``, looked up in the
``translations`` setting for the active Django language:

    SIMPLE_FORM = {
        "translations": {
            "en": {"simple_form": {"hints": {"user": {"name": "Your full name"}}}},
            "pt": {"simple_form": {"create": "Criar %(model)s"}},
        }
    }

Fallback strings are passed through gettext by the callers, so the regular
Django message catalogs still apply when no keyed translation exists.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from django.conf import settings
from django.utils.translation import get_language

from . import config

logger = logging.getLogger(__name__)

_stored: list[tuple[str, dict[str, Any]]] = []


def _languages() -> list[str]:
    language = (get_language() or settings.LANGUAGE_CODE or "en").lower()
    languages = [language]
    base = language.split("-")[0]
    if base != language:
        languages.append(base)
    return languages


def _dig(data: dict[str, Any], key: str) -> Any:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _catalogs() -> Iterator[dict[str, Any]]:
    languages = _languages()
    for language in languages:
        for stored_language, data in reversed(_stored):
            if stored_language == language:
                yield data
        configured = config.get("translations").get(language)
        if configured:
            yield configured


def _interpolate(text: Any, params: dict[str, Any]) -> str:
    if not params:
        return str(text)
    try:
        return text % params
    except (KeyError, TypeError, ValueError):
        logger.debug("Could not interpolate %r with %r", text, params)
        return str(text)


def translate(*keys: str, default: str | None = None, **params: Any) -> str | None:
    """
    Return the first translation found for ``keys``, else ``default``.

    Parameters are interpolated with ``%(name)s`` placeholders. A text that
    cannot be interpolated (a lone ``%``, an unknown placeholder) is returned
    as written.
    """
    for key in keys:
        for catalog in _catalogs():
            value = _dig(catalog, key)
            if isinstance(value, str):
                return _interpolate(value, params)

    if default is None:
        return None
    return _interpolate(default, params)


@contextmanager
def store_translations(language: str, data: dict[str, Any]) -> Iterator[None]:
    """Make ``data`` available as translations for ``language`` inside the block."""
    _stored.append((language.lower(), data))
    try:
        yield
    finally:
        _stored.pop()
