"""
Package settings.

Defaults can be changed project-wide through the ``SIMPLE_FORM`` Django
setting:

    SIMPLE_FORM = {
        "wrapper_tag": "p",
        "label_text": lambda label, required: f"{label} {required}",
    }

and temporarily with ``swap``, which is mostly useful in tests:

    with config.swap(wrapper_tag="li"):
        ...
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.html import format_html


def default_label_text(label: str, required: str) -> str:
    return f"{required} {label}"


DEFAULTS: dict[str, Any] = {
    # Tag wrapping label, input, hint and error for each attribute
    "wrapper_tag": "div",
    # Extra class added to the wrapper when the attribute has errors
    "wrapper_error_class": "field_with_errors",
    # Order in which components are rendered inside the wrapper
    "components": ("label", "input", "hint", "error"),
    # Callable building the label content from (label, required_marker)
    "label_text": default_label_text,
    "required_marker": format_html('<abbr title="{}">*</abbr>', "required"),
    "hint_tag": "span",
    "error_tag": "span",
    # Attributes tried, in order, to get labels and values out of collection items
    "collection_label_methods": ("to_label", "name", "title"),
    "collection_value_methods": ("pk", "id"),
    "required_by_default": True,
    # Keyed translations: {"en": {"simple_form": {"hints": {...}}}}
    "translations": {},
}

_overrides: list[dict[str, Any]] = []


def _check_names(names) -> None:
    unknown = sorted(set(names) - set(DEFAULTS))
    if unknown:
        raise ImproperlyConfigured(
            f"Unknown SIMPLE_FORM setting(s): {', '.join(unknown)}"
        )


def get(name: str) -> Any:
    """Return the effective value of a setting."""
    _check_names([name])

    for overrides in reversed(_overrides):
        if name in overrides:
            return overrides[name]

    project = getattr(settings, "SIMPLE_FORM", None) or {}
    if not isinstance(project, dict):
        raise ImproperlyConfigured("The SIMPLE_FORM setting must be a dict.")
    _check_names(project)

    return project.get(name, DEFAULTS[name])


@contextmanager
def swap(**overrides: Any) -> Iterator[None]:
    """Override settings for the duration of the block."""
    _check_names(overrides)
    _overrides.append(overrides)
    try:
        yield
    finally:
        _overrides.pop()
