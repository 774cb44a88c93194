"""Markup for the pieces surrounding an input: label, hint, error and wrapper."""

from __future__ import annotations

from typing import Any

from django.forms.utils import flatatt
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe
from django.utils.text import get_text_list
from django.utils.translation import gettext

from . import config, i18n
from .inputs import css_classes
from .metadata import humanize
from .types import AttributeInfo


# Text Lookups

def label_text_for(model: str, attribute: str, info: AttributeInfo | None) -> str:
    """Label from i18n, then the model's attribute name, then the humanized attribute."""
    translated = i18n.translate(
        f"simple_form.labels.{model}.{attribute}",
        f"simple_form.labels.{attribute}",
    )
    if translated is not None:
        return translated
    if info is not None and info.human_name:
        return info.human_name
    return humanize(attribute)


def hint_text_for(model: str, attribute: str) -> str | None:
    return i18n.translate(
        f"simple_form.hints.{model}.{attribute}",
        f"simple_form.hints.{attribute}",
    )


# Tags

def render_label(
    text: str,
    html_for: str,
    *,
    required: bool,
    classes: str = "",
    attrs: dict[str, Any] | None = None,
) -> SafeString:
    """Render a <label> whose content goes through the ``label_text`` setting."""
    marker = config.get("required_marker") if required else ""
    content = config.get("label_text")(conditional_escape(text), marker)

    attrs = dict(attrs or {})
    label_attrs = {
        "for": html_for,
        **attrs,
        "class": css_classes(classes, attrs.get("class")) or None,
    }
    return format_html("<label{}>{}</label>", flatatt(label_attrs), mark_safe(str(content).strip()))


def render_plain_label(text: str, html_for: str, attrs: dict[str, Any] | None = None) -> SafeString:
    return format_html("<label{}>{}</label>", flatatt({"for": html_for, **(attrs or {})}), text)


def render_hint(text: str, attrs: dict[str, Any] | None = None) -> SafeString:
    attrs = dict(attrs or {})
    attrs["class"] = css_classes("hint", attrs.get("class"))
    tag = config.get("hint_tag")
    return format_html("<{}{}>{}</{}>", tag, flatatt(attrs), text, tag)


def render_error(messages: list[str], attrs: dict[str, Any] | None = None) -> SafeString:
    """Render the messages of one attribute joined as a sentence ("a, b and c")."""
    if not messages:
        return SafeString("")
    attrs = dict(attrs or {})
    attrs["class"] = css_classes("error", attrs.get("class"))
    tag = config.get("error_tag")
    text = get_text_list([str(message) for message in messages], gettext("and"))
    return format_html("<{}{}>{}</{}>", tag, flatatt(attrs), text, tag)


def render_wrapper(
    content: SafeString,
    tag: str | None,
    *,
    classes: str,
    attrs: dict[str, Any] | None = None,
) -> SafeString:
    """Wrap ``content`` in ``tag``; a falsy tag returns the content as is."""
    if not tag:
        return content
    attrs = dict(attrs or {})
    attrs["class"] = css_classes(classes, attrs.get("class"))
    return format_html("<{}{}>{}</{}>", tag, flatatt(attrs), content, tag)
