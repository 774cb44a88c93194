"""
Input types and the Django widgets that render them.

Each input type name maps to a factory building a configured Django widget.
Custom input types can be added with ``register_input``:

    from django import forms
    from simpleform.inputs import register_input

    @register_input("color")
    def color_input(spec, attrs):
        return forms.TextInput(attrs={"type": "color", **attrs})

    form.input("favorite_color", **{"as": "color"})
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from django import forms
from django.utils.safestring import SafeString

from .types import WidgetSpec

WidgetFactory = Callable[[WidgetSpec, dict[str, Any]], forms.Widget]

INPUT_WIDGETS: dict[str, WidgetFactory] = {}


def register_input(name: str) -> Callable[[WidgetFactory], WidgetFactory]:
    """Register ``factory`` as the widget builder for the input type ``name``."""

    def decorator(factory: WidgetFactory) -> WidgetFactory:
        INPUT_WIDGETS[name] = factory
        return factory

    return decorator


def css_classes(*classes: str | Iterable[str] | None) -> str:
    """Join class names, dropping blanks and duplicates but keeping order."""
    names: list[str] = []
    for entry in classes:
        if not entry:
            continue
        parts = entry.split() if isinstance(entry, str) else entry
        for name in parts:
            if name and name not in names:
                names.append(name)
    return " ".join(names)


def render_input(
    spec: WidgetSpec,
    name: str,
    html_id: str,
    value: Any,
    input_html: dict[str, Any] | None = None,
) -> SafeString:
    """
    Render the control for ``spec``.

    The control carries the input type and required/optional as classes,
    followed by any class given in ``input_html``. Other ``input_html``
    attributes, ``id`` included, override the defaults.
    """
    factory = INPUT_WIDGETS.get(spec.input_type)
    if factory is None:
        raise ValueError(
            f"Unknown input type {spec.input_type!r}. "
            f"Available types: {', '.join(sorted(INPUT_WIDGETS))}"
        )

    input_html = dict(input_html or {})
    classes = css_classes(
        spec.input_type,
        "required" if spec.required else "optional",
        input_html.pop("class", None),
    )
    attrs = {**spec.attrs, "id": html_id, **input_html, "class": classes}

    widget = factory(spec, attrs)
    return widget.render(name, value)


def option_id_suffix(value: Any) -> str:
    """user_active + True -> user_active_true"""
    return re.sub(r"[^-\w]", "", re.sub(r"\s", "_", str(value))).lower()


class ValueRadioSelect(forms.RadioSelect):
    """RadioSelect whose option ids end with the option value instead of its index."""

    def create_option(self, name, value, label, selected, index, subindex=None, attrs=None):
        option = super().create_option(name, value, label, selected, index, subindex=subindex, attrs=attrs)
        base_id = (attrs or {}).get("id") or self.attrs.get("id")
        if base_id and "id" in option["attrs"]:
            option["attrs"]["id"] = f"{base_id}_{option_id_suffix(value)}"
        return option


# Built-in Input Types

@register_input("string")
def string_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.TextInput(attrs=attrs)


@register_input("text")
def text_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.Textarea(attrs=attrs)


@register_input("password")
def password_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.PasswordInput(attrs=attrs, render_value=False)


@register_input("boolean")
def boolean_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.CheckboxInput(attrs=attrs)


@register_input("integer")
def integer_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.NumberInput(attrs=attrs)


@register_input("decimal")
@register_input("float")
def decimal_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.NumberInput(attrs={"step": "any", **attrs})


@register_input("date")
def date_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    # Django extracts 'type' attr and stores as input_type
    return forms.DateInput(attrs={"type": "date", **attrs}, format="%Y-%m-%d")


@register_input("time")
def time_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.TimeInput(attrs={"type": "time", **attrs}, format="%H:%M")


@register_input("datetime")
def datetime_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.DateTimeInput(attrs={"type": "datetime-local", **attrs}, format="%Y-%m-%dT%H:%M")


@register_input("email")
def email_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.EmailInput(attrs=attrs)


@register_input("url")
def url_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.URLInput(attrs=attrs)


@register_input("hidden")
def hidden_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return forms.HiddenInput(attrs=attrs)


@register_input("select")
def select_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    choices = list(spec.collection or [])
    if spec.multiple:
        return forms.SelectMultiple(attrs=attrs, choices=choices)
    if spec.include_blank:
        choices.insert(0, ("", ""))
    return forms.Select(attrs=attrs, choices=choices)


@register_input("radio")
def radio_input(spec: WidgetSpec, attrs: dict[str, Any]) -> forms.Widget:
    return ValueRadioSelect(attrs=attrs, choices=list(spec.collection or []))
