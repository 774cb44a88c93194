"""
FormBuilder: per-attribute form markup from model metadata.

A builder is bound to a record (or just an object name) and renders complete
fields, each made of a label, the inferred control, a hint and the
attribute's errors inside a wrapper tag:

    from simpleform import simple_form_for

    html = simple_form_for(
        user,
        lambda f: [
            f.input("name"),
            f.input("age", required=False, hint="In years"),
            f.association("company"),
            f.button("submit"),
        ],
        url="/users/1/",
        errors=form.errors,
    )

Records can be Django model instances, Pydantic model instances or
dataclass instances. When only a name is given (``simple_form_for("search", ...)``)
every attribute renders as a text input unless its name looks like a password
or an ``as`` option says otherwise.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Callable, Iterable

from django.core.exceptions import ImproperlyConfigured
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.forms.utils import flatatt
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe
from django.utils.text import capfirst
from django.utils.translation import gettext
from django.utils.translation import gettext_lazy as _
from pydantic import ValidationError as PydanticValidationError

from . import components, config, i18n
from .inference import infer_widget
from .inputs import css_classes, render_input
from .metadata import (
    association_info,
    attribute_info,
    attribute_value,
    collect_errors,
    human_model_name,
    is_new_record,
    model_name,
)

logger = logging.getLogger(__name__)

SUBMIT_CAPTIONS = {
    "create": _("Create %(model)s"),
    "update": _("Update %(model)s"),
    "submit": _("Submit %(model)s"),
}

FORM_METHODS = ("get", "post")

_MISSING = object()


def html_attrs(attrs: dict[str, Any]) -> dict[str, Any]:
    """Accept ``class_`` and ``for_`` for the reserved words."""
    return {key.rstrip("_") if key.endswith("_") else key: value for key, value in attrs.items()}


def _record_errors(record: Any) -> Any:
    errors = getattr(record, "errors", None)
    if isinstance(errors, (Mapping, DjangoValidationError, PydanticValidationError)):
        return errors
    return None


class FormBuilder:
    """
    Renders form markup for the attributes of one record.

    Usage:
        f = FormBuilder(user)                # named after the model: "user"
        f = FormBuilder("project")           # no record, name only
        f = FormBuilder("account", user)     # record under another name

        f.input("name")
        f.input("active", **{"as": "radio"})
        f.input("age", collection=range(18, 100))
    """

    def __init__(self, object_name: Any, record: Any = None, *, errors: Any = None):
        if not isinstance(object_name, str):
            if record is not None:
                raise TypeError(
                    f"{type(self).__name__} got a record both as object name and as record; "
                    "pass a name and a record, or only the record."
                )
            object_name, record = model_name(object_name), object_name

        self.object_name = object_name
        self.record = record
        self.errors = collect_errors(errors if errors is not None else _record_errors(record))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.object_name!r} record={self.record!r}>"

    # Naming

    @property
    def model(self) -> str:
        """Name used in i18n keys."""
        if self.record is not None:
            return model_name(self.record)
        return re.findall(r"\w+", self.object_name)[-1]

    @property
    def sanitized_object_name(self) -> str:
        """user[posts] -> user_posts"""
        return re.sub(r"\]\[|[^-a-zA-Z0-9:.]", "_", self.object_name).rstrip("_")

    def field_id(self, attribute: str) -> str:
        return f"{self.sanitized_object_name}_{attribute}"

    def field_name(self, attribute: str) -> str:
        return f"{self.object_name}[{attribute}]"

    # Fields

    def input(self, attribute: str, **options: Any) -> SafeString:
        """
        Render the complete field for ``attribute``.

        Options:
            as: Input type to use instead of the inferred one
            collection: Items for a select or radio input
            label_method, value_method: How to read collection items
            include_blank: Whether a select starts with an empty option
            required: Override the required state
            label: Label text, or False for no label
            hint: Hint text, or False to skip even an i18n hint
            error: False to hide the attribute's errors
            input_html, label_html, hint_html, error_html: Extra attributes
            wrapper: Wrapper tag, or False for no wrapper
            wrapper_html: Extra wrapper attributes
        """
        return self._render_field(attribute, options)

    def _render_field(self, attribute: str, options: dict[str, Any], value: Any = _MISSING) -> SafeString:
        info = attribute_info(self.record, attribute)
        spec = infer_widget(attribute, info, options)
        required_class = "required" if spec.required else "optional"

        input_html = html_attrs(options.get("input_html") or {})
        html_id = input_html.get("id") or self.field_id(attribute)
        if value is _MISSING:
            value = attribute_value(self.record, attribute)

        parts: dict[str, SafeString] = {
            "label": SafeString(""),
            "input": render_input(spec, self.field_name(attribute), self.field_id(attribute), value, input_html),
            "hint": SafeString(""),
            "error": SafeString(""),
        }

        label = options.get("label")
        if label is not False:
            parts["label"] = components.render_label(
                label or components.label_text_for(self.model, attribute, info),
                html_id,
                required=spec.required,
                classes=css_classes(spec.input_type, required_class),
                attrs=html_attrs(options.get("label_html") or {}),
            )

        hint = options.get("hint")
        if hint is not False:
            hint = hint or components.hint_text_for(self.model, attribute)
            if hint:
                parts["hint"] = components.render_hint(hint, html_attrs(options.get("hint_html") or {}))

        messages = self.errors.get(attribute, [])
        if options.get("error") is not False:
            parts["error"] = components.render_error(messages, html_attrs(options.get("error_html") or {}))

        try:
            content = mark_safe("".join(parts[name] for name in config.get("components")))
        except KeyError as e:
            raise ImproperlyConfigured(f"Unknown form component {e.args[0]!r} in 'components'.") from None

        wrapper = options.get("wrapper")
        if wrapper is None:
            wrapper = config.get("wrapper_tag")

        return components.render_wrapper(
            content,
            wrapper or None,
            classes=css_classes(
                spec.input_type,
                required_class,
                config.get("wrapper_error_class") if messages else None,
            ),
            attrs=html_attrs(options.get("wrapper_html") or {}),
        )

    # Components

    def label(self, attribute: str, text: str | None = None, **attrs: Any) -> SafeString:
        """
        Render the label of ``attribute``.

        A positional ``text`` gives a plain label; otherwise the label carries
        the input type and required classes and ``label=`` sets its text.
        """
        attrs = html_attrs(attrs)
        if text is not None:
            return components.render_plain_label(text, self.field_id(attribute), attrs)

        label = attrs.pop("label", None)
        options = {"required": attrs.pop("required", None), "as": attrs.pop("as", None)}
        info = attribute_info(self.record, attribute)
        spec = infer_widget(attribute, info, options)

        return components.render_label(
            label or components.label_text_for(self.model, attribute, info),
            self.field_id(attribute),
            required=spec.required,
            classes=css_classes(spec.input_type, "required" if spec.required else "optional"),
            attrs=attrs,
        )

    def hint(self, attribute: str, hint: str | None = None, **attrs: Any) -> SafeString:
        """
        Render a hint for ``attribute``.

        Without a translated hint, anything that is not an attribute of the
        record is taken as the hint text itself, so ``f.hint("Optional")`` and
        ``f.hint("Use your full name.")`` work without i18n.
        """
        if hint is None:
            if attribute.isidentifier():
                hint = components.hint_text_for(self.model, attribute)
            if not hint and attribute_info(self.record, attribute) is None:
                hint = attribute
        if not hint:
            return SafeString("")
        return components.render_hint(hint, html_attrs(attrs))

    def error(self, attribute: str, **attrs: Any) -> SafeString:
        return components.render_error(self.errors.get(attribute, []), html_attrs(attrs))

    # Buttons

    def button(self, kind: str, label: str | None = None, **attrs: Any) -> SafeString:
        """
        Render a button.

        Kinds:
            submit: <input type="submit"> captioned "Create User", "Update User"
                or "Submit Post" depending on the record
            image_submit: <input type="image">, with the image source as second argument
            button, reset: <button>
        """
        attrs = html_attrs(attrs)
        label = attrs.pop("label", label)

        if kind == "submit":
            key = self._submit_key()
            if label is None:
                label = i18n.translate(
                    f"simple_form.{key}",
                    default=SUBMIT_CAPTIONS[key],
                    model=human_model_name(self.record, self.model),
                )
            attrs["class"] = css_classes(key, attrs.get("class"))
            return format_html("<input{}>", flatatt({"type": "submit", "name": "commit", "value": label, **attrs}))

        if kind == "image_submit":
            if not label:
                raise ValueError("image_submit buttons need the image source as second argument.")
            return format_html("<input{}>", flatatt({"type": "image", "src": label, **attrs}))

        if kind in ("button", "reset"):
            return format_html(
                "<button{}>{}</button>",
                flatatt({"type": kind, **attrs}),
                label or capfirst(gettext(kind)),
            )

        raise ValueError(f"Unknown button kind {kind!r}; use submit, image_submit, button or reset.")

    def _submit_key(self) -> str:
        if self.record is None:
            return "submit"
        return "create" if is_new_record(self.record) else "update"

    # Associations

    def association(self, name: str, **options: Any) -> SafeString:
        """
        Render a select (or radios) for a relation of the record.

        Options, on top of the ``input`` ones:
            conditions: Mapping passed to ``filter()`` on the related model
            order: Field name(s) passed to ``order_by()``
        """
        association = association_info(self.record, name)
        conditions = options.pop("conditions", None)
        order = options.pop("order", None)

        if options.get("collection") is None:
            queryset = association.related_model._default_manager.all()
            if conditions:
                queryset = queryset.filter(**conditions)
            if order:
                queryset = queryset.order_by(*([order] if isinstance(order, str) else order))
            logger.debug("Loading %s choices for %s.%s", association.related_model.__name__, self.model, name)
            options["collection"] = queryset

        options.setdefault("multiple", association.multiple)

        value: Any = _MISSING
        if association.multiple:
            # Unsaved records have no many-to-many manager yet
            value = []
            if self.record.pk is not None:
                value = list(getattr(self.record, name).values_list("pk", flat=True))

        return self._render_field(association.attname, options, value)

    # Nesting

    def simple_fields_for(self, name: str, record: Any = None, **options: Any) -> FormBuilder:
        """Return a builder for ``name`` nested under this one (``user[posts][title]``)."""
        if record is None and self.record is not None:
            candidate = getattr(self.record, name, None)
            if candidate is not None and not isinstance(candidate, models.Manager):
                record = candidate

        builder_class = options.pop("builder_class", type(self))
        return builder_class(f"{self.object_name}[{name}]", record, errors=options.pop("errors", None))


def simple_form_for(
    record: Any,
    fields: Callable[[FormBuilder], Any] | None = None,
    *,
    url: str = "",
    method: str = "post",
    html: dict[str, Any] | None = None,
    errors: Any = None,
    csrf_token: str | None = None,
    builder_class: type[FormBuilder] = FormBuilder,
) -> SafeString:
    """
    Render a <form> for ``record`` (or an object name).

    ``fields`` receives the FormBuilder and returns the markup to put in the
    form, as one fragment or an iterable of fragments.
    """
    method = method.lower()
    if method not in FORM_METHODS:
        raise ValueError(f"HTML forms only support GET and POST, got {method.upper()!r}.")

    builder = builder_class(record, errors=errors)

    form_id = None
    if builder.record is not None:
        if is_new_record(builder.record):
            form_id = f"new_{builder.model}"
        else:
            form_id = f"edit_{builder.model}_{getattr(builder.record, 'pk', getattr(builder.record, 'id', ''))}"

    html = html_attrs(html or {})
    attrs = {
        "action": url,
        "method": method,
        "id": form_id,
        **html,
        "class": css_classes("simple_form", builder.model, html.get("class")),
    }

    parts: list[Any] = []
    if csrf_token:
        parts.append(format_html('<input type="hidden" name="csrfmiddlewaretoken" value="{}">', csrf_token))
    if fields is not None:
        content = fields(builder)
        if isinstance(content, str) or not isinstance(content, Iterable):
            parts.append(content)
        else:
            parts.extend(content)

    body = mark_safe("".join(conditional_escape(part) for part in parts if part is not None))
    return format_html("<form{}>{}</form>", flatatt(attrs), body)
