"""
Attribute to widget inference.

Given the column metadata of an attribute and the options passed to
``FormBuilder.input``, decide which control to render:

    info = attribute_info(user, "credit_limit")
    spec = infer_widget("credit_limit", info, {"required": False})
    spec.input_type  # "decimal"

The rules, in order: an explicit ``as`` option, a ``collection`` option
(select), column choices (select), the column type, and finally the attribute
name when nothing is known about the column ("password" for anything named
like a password, "string" otherwise).
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable

from django.utils.translation import gettext

from . import config, i18n
from .metadata import humanize
from .types import AttributeInfo, WidgetSpec

logger = logging.getLogger(__name__)

COLLECTION_INPUTS = ("select", "radio")

# Inputs that understand min, max and step
RANGE_INPUTS = ("integer", "decimal", "float", "date", "time", "datetime")

RANGE_ATTRS = ("min", "max", "step")

SCALAR_TYPES = (str, int, float, Decimal, date, datetime, time)


def default_input_type(attribute: str, info: AttributeInfo | None, options: dict[str, Any]) -> str:
    """Return the input type for ``attribute``."""
    input_type = options.get("as")
    if input_type:
        return input_type

    if options.get("collection") is not None:
        return "select"

    if info is not None and info.choices:
        return "select"

    if info is None or info.column_type is None:
        return "password" if "password" in attribute else "string"

    if info.column_type == "string" and "password" in attribute:
        return "password"

    return info.column_type


def resolve_required(info: AttributeInfo | None, options: dict[str, Any]) -> bool:
    required = options.get("required")
    if required is not None:
        return bool(required)
    if info is not None and info.required is not None:
        return info.required
    return bool(config.get("required_by_default"))


def boolean_collection() -> list[tuple[Any, str]]:
    return [
        (True, i18n.translate("simple_form.yes", default=gettext("Yes"))),
        (False, i18n.translate("simple_form.no", default=gettext("No"))),
    ]


def infer_widget(attribute: str, info: AttributeInfo | None, options: dict[str, Any]) -> WidgetSpec:
    """Combine column metadata and caller options into a WidgetSpec."""
    input_type = default_input_type(attribute, info, options)
    multiple = bool(options.get("multiple", False))

    collection = None
    if input_type in COLLECTION_INPUTS:
        source = options.get("collection")
        if source is not None:
            collection = collection_choices(
                source,
                label_method=options.get("label_method"),
                value_method=options.get("value_method"),
            )
        elif info is not None and info.choices:
            collection = list(info.choices)
        elif info is not None and info.column_type == "boolean":
            collection = boolean_collection()
        else:
            collection = []

    attrs: dict[str, Any] = {}
    if info is not None and input_type not in (*COLLECTION_INPUTS, "boolean", "hidden"):
        attrs.update(
            (key, value)
            for key, value in info.widget_attrs.items()
            if key not in RANGE_ATTRS or input_type in RANGE_INPUTS
        )

    spec = WidgetSpec(
        input_type=input_type,
        required=resolve_required(info, options),
        collection=collection,
        include_blank=bool(options.get("include_blank", not multiple)),
        multiple=multiple,
        attrs=attrs,
    )
    logger.debug(
        "Inferred %s input for %r (column type %s)",
        spec.input_type,
        attribute,
        info.column_type if info is not None else None,
    )
    return spec


# Collections

def collection_choices(
    collection: Iterable[Any],
    label_method: str | Callable[[Any], Any] | None = None,
    value_method: str | Callable[[Any], Any] | None = None,
) -> list[tuple[Any, str]]:
    """
    Turn a collection into (value, label) pairs.

    Items may be (value, label) pairs, enum members, scalars (ranges, lists of
    strings), Django model instances or arbitrary objects. Labels and values
    of objects come from ``label_method``/``value_method`` when given, else
    from the first of the ``collection_label_methods`` and
    ``collection_value_methods`` settings the item has.
    """
    choices: list[tuple[Any, str]] = []
    for item in collection:
        if isinstance(item, (tuple, list)) and len(item) == 2:
            value, label = item
            choices.append((value, str(label)))
        elif isinstance(item, Enum):
            choices.append((item.value, humanize(item.name.lower())))
        else:
            choices.append((_item_value(item, value_method), _item_label(item, label_method)))
    return choices


def _call(item: Any, method: str | Callable[[Any], Any]) -> Any:
    if callable(method):
        return method(item)
    value = getattr(item, method)
    return value() if callable(value) else value


def _item_label(item: Any, label_method: str | Callable[[Any], Any] | None) -> str:
    if label_method is not None:
        return str(_call(item, label_method))
    if isinstance(item, SCALAR_TYPES):
        return str(item)
    for method in config.get("collection_label_methods"):
        if hasattr(item, method):
            return str(_call(item, method))
    return str(item)


def _item_value(item: Any, value_method: str | Callable[[Any], Any] | None) -> Any:
    if value_method is not None:
        return _call(item, value_method)
    if isinstance(item, SCALAR_TYPES):
        return item
    for method in config.get("collection_value_methods"):
        if hasattr(item, method):
            return _call(item, method)
    return str(item)
