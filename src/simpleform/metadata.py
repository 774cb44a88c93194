"""
Model introspection for the form builder.

Turns a record (Django model instance, Pydantic model instance or dataclass
instance) into the view-layer facts the builder needs: the column type and
constraints of an attribute, its current value, the model's display name,
whether the record is persisted, its associations, and its validation errors.

Validation itself is never performed here. Errors are whatever the caller
already computed (a Django form's ``errors``, a ``ValidationError`` from
``full_clean()``, a Pydantic ``ValidationError`` or a plain mapping).
"""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Union, get_args, get_origin
from uuid import UUID

from annotated_types import Ge, Gt, Le, Lt, MaxLen, MinLen, MultipleOf
from django.core.exceptions import NON_FIELD_ERRORS, FieldDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.utils.functional import Promise
from django.utils.text import capfirst
from pydantic import (
    AnyUrl,
    AwareDatetime,
    BaseModel,
    EmailStr,
    FutureDate,
    FutureDatetime,
    HttpUrl,
    NaiveDatetime,
    PastDate,
    PastDatetime,
    SecretStr,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo
from pydantic_core import ErrorDetails

from .types import AssociationInfo, AttributeInfo


# Python Type to Column Type Mapping

TYPE_TO_COLUMN: dict[Any, str] = {
    str: "string",
    int: "integer",
    float: "float",
    Decimal: "decimal",
    bool: "boolean",
    date: "date",
    datetime: "datetime",
    time: "time",
    timedelta: "string",
    UUID: "string",
}

# Add Pydantic types
TYPE_TO_COLUMN[EmailStr] = "email"
TYPE_TO_COLUMN[HttpUrl] = "url"
TYPE_TO_COLUMN[AnyUrl] = "url"
TYPE_TO_COLUMN[SecretStr] = "password"

# Add Pydantic constrained date/datetime types
TYPE_TO_COLUMN[PastDate] = "date"
TYPE_TO_COLUMN[FutureDate] = "date"
TYPE_TO_COLUMN[PastDatetime] = "datetime"
TYPE_TO_COLUMN[FutureDatetime] = "datetime"
TYPE_TO_COLUMN[AwareDatetime] = "datetime"
TYPE_TO_COLUMN[NaiveDatetime] = "datetime"


# Django Model Field to Column Type Mapping
# Checked in order, so subclasses come before their parents
# (DateTimeField is a DateField, EmailField and SlugField are CharFields).

DJANGO_FIELD_TO_COLUMN: list[tuple[type[models.Field], str]] = [
    (models.EmailField, "email"),
    (models.URLField, "url"),
    (models.TextField, "text"),
    (models.BooleanField, "boolean"),
    (models.DecimalField, "decimal"),
    (models.FloatField, "float"),
    (models.IntegerField, "integer"),
    (models.DateTimeField, "datetime"),
    (models.DateField, "date"),
    (models.TimeField, "time"),
    (models.UUIDField, "string"),
    (models.CharField, "string"),
]


# Pydantic Error Message Translation

PYDANTIC_ERROR_MESSAGES: dict[str, str] = {
    "missing": "can't be blank",
    "string_too_short": "is too short (minimum is {min_length} characters)",
    "string_too_long": "is too long (maximum is {max_length} characters)",
    "string_pattern_mismatch": "is invalid",
    "int_type": "is not a number",
    "int_parsing": "is not a number",
    "float_type": "is not a number",
    "float_parsing": "is not a number",
    "decimal_type": "is not a number",
    "decimal_parsing": "is not a number",
    "greater_than": "must be greater than {gt}",
    "greater_than_equal": "must be greater than or equal to {ge}",
    "less_than": "must be less than {lt}",
    "less_than_equal": "must be less than or equal to {le}",
    "date_parsing": "is not a valid date",
    "datetime_parsing": "is not a valid date and time",
    "time_parsing": "is not a valid time",
    "literal_error": "is not included in the list",
    "enum": "is not included in the list",
}


# Naming

def underscore(name: str) -> str:
    """CreditCard -> credit_card"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def humanize(name: str) -> str:
    """credit_limit -> Credit limit, company_id -> Company"""
    if name.endswith("_id"):
        name = name[:-3]
    return capfirst(name.replace("_", " ").strip())


def model_name(record: Any) -> str:
    """Return the snake case model name used for ids, names and i18n keys."""
    if isinstance(record, str):
        return record
    if isinstance(record, models.Model):
        return record._meta.model_name
    return underscore(type(record).__name__)


def human_model_name(record: Any, object_name: str) -> str:
    """Return the display name of the record's model, e.g. for button captions."""
    if record is None:
        return humanize(object_name)

    cls = type(record)
    hook = getattr(cls, "human_name", None)
    if callable(hook):
        return str(hook())

    if isinstance(record, models.Model):
        return str(capfirst(cls._meta.verbose_name))
    if isinstance(record, BaseModel):
        title = cls.model_config.get("title")
        if title:
            return title

    return humanize(model_name(record))


def is_new_record(record: Any) -> bool:
    """Whether the record has not been persisted yet."""
    explicit = getattr(record, "new_record", None)
    if explicit is not None:
        return bool(explicit() if callable(explicit) else explicit)

    if isinstance(record, models.Model):
        return record._state.adding

    return getattr(record, "pk", getattr(record, "id", None)) is None


# Attribute Introspection

def attribute_info(record: Any, attribute: str) -> AttributeInfo | None:
    """
    Return the column metadata of ``attribute`` on ``record``.

    Returns None when there is no record or the attribute is not a known
    column of its model, in which case the builder falls back to inferring
    from the attribute name alone.
    """
    if record is None:
        return None
    if isinstance(record, models.Model):
        return _django_attribute_info(record, attribute)
    if isinstance(record, BaseModel):
        field_info = type(record).model_fields.get(attribute)
        if field_info is None:
            return None
        return _pydantic_attribute_info(attribute, field_info)
    if dataclasses.is_dataclass(record):
        return _dataclass_attribute_info(record, attribute)
    return None


def attribute_value(record: Any, attribute: str) -> Any:
    """Return the current value of ``attribute``, never exposing secrets."""
    if record is None:
        return None

    value = getattr(record, attribute, None)
    if isinstance(value, SecretStr):
        return None
    if isinstance(value, Enum):
        return value.value
    return value


def _django_attribute_info(record: models.Model, attribute: str) -> AttributeInfo | None:
    try:
        field = record._meta.get_field(attribute)
    except FieldDoesNotExist:
        return None

    if field.is_relation:
        return AttributeInfo(
            name=attribute,
            required=not field.blank,
            human_name=str(capfirst(field.verbose_name)),
        )

    column_type = None
    for field_class, column in DJANGO_FIELD_TO_COLUMN:
        if isinstance(field, field_class):
            column_type = column
            break

    choices = None
    if field.choices:
        choices = [(value, str(label)) for value, label in field.flatchoices]

    widget_attrs: dict[str, Any] = {}
    max_length = getattr(field, "max_length", None)
    if max_length and column_type in ("string", "email", "url"):
        widget_attrs["maxlength"] = max_length

    return AttributeInfo(
        name=attribute,
        column_type=column_type,
        required=not field.blank,
        human_name=str(capfirst(field.verbose_name)),
        choices=choices,
        max_length=max_length,
        widget_attrs=widget_attrs,
    )


def _pydantic_attribute_info(attribute: str, field_info: FieldInfo) -> AttributeInfo:
    annotation = field_info.annotation

    # Unwrap Optional types first
    is_optional = False
    core_type = annotation
    unwrapped = unwrap_optional(annotation)
    if unwrapped is not None:
        is_optional = True
        core_type = unwrapped

    # Optional[Annotated[X, ...]] keeps its metadata on the inner annotation
    metadata = list(field_info.metadata)
    if get_origin(core_type) is typing.Annotated:
        core_type, *extra = get_args(core_type)
        for meta in extra:
            metadata.extend(meta.metadata if isinstance(meta, FieldInfo) else [meta])

    if get_format(field_info.json_schema_extra, annotation) == "text":
        column_type: str | None = "text"
    else:
        column_type = column_type_for(core_type)

    widget_attrs = extract_constraints(metadata)
    widget_attrs.update(datetime_min_max_attrs(core_type))

    return AttributeInfo(
        name=attribute,
        column_type=column_type,
        required=field_info.is_required() and not is_optional,
        human_name=field_info.title or field_info.alias,
        choices=detect_choices(core_type),
        max_length=widget_attrs.get("maxlength"),
        widget_attrs=widget_attrs,
    )


def _dataclass_attribute_info(record: Any, attribute: str) -> AttributeInfo | None:
    fields = {f.name: f for f in dataclasses.fields(record)}
    if attribute not in fields:
        return None
    field = fields[attribute]

    hints = typing.get_type_hints(type(record), include_extras=True)
    annotation = hints.get(attribute, Any)

    is_optional = False
    core_type = annotation
    unwrapped = unwrap_optional(annotation)
    if unwrapped is not None:
        is_optional = True
        core_type = unwrapped

    metadata: tuple[Any, ...] = ()
    if get_origin(core_type) is typing.Annotated:
        core_type, *extra = get_args(core_type)
        metadata = tuple(extra)

    if get_format(None, annotation) == "text" or _annotated_format(metadata) == "text":
        column_type: str | None = "text"
    else:
        column_type = column_type_for(core_type)

    field_metadata: list[Any] = []
    for meta in metadata:
        if isinstance(meta, FieldInfo):
            field_metadata.extend(meta.metadata)
        else:
            field_metadata.append(meta)

    widget_attrs = extract_constraints(field_metadata)
    widget_attrs.update(datetime_min_max_attrs(core_type))

    has_default = (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )

    return AttributeInfo(
        name=attribute,
        column_type=column_type,
        required=not has_default and not is_optional,
        choices=detect_choices(core_type),
        max_length=widget_attrs.get("maxlength"),
        widget_attrs=widget_attrs,
    )


# Type Introspection Helpers

def column_type_for(python_type: Any) -> str | None:
    """Map a Python type to a column type."""
    # Direct lookup
    if python_type in TYPE_TO_COLUMN:
        return TYPE_TO_COLUMN[python_type]

    # Check for subclasses (e.g., custom Enum that's also a str)
    if get_origin(python_type) is None and isinstance(python_type, type):
        for type_key, column in TYPE_TO_COLUMN.items():
            if issubclass(python_type, type_key):
                return column

    return None


def unwrap_optional(annotation: Any) -> Any | None:
    """
    If annotation is Optional[X] or X | None, return X.
    Otherwise return None.
    """
    origin = get_origin(annotation)

    # Handle Union types (including X | None syntax)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1 and type(None) in args:
            return non_none_args[0]

    return None


def detect_choices(annotation: Any) -> list[tuple[Any, str]] | None:
    """
    Detect if annotation is a Literal or Enum and return choices.
    Returns list of (value, label) tuples or None.
    """
    origin = get_origin(annotation)

    # Literal["a", "b", "c"]
    if origin is Literal:
        return [(val, str(val)) for val in get_args(annotation)]

    # Enum subclass
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return [(member.value, humanize(member.name.lower())) for member in annotation]

    return None


def get_format(extra: Any, annotation: Any) -> str | None:
    """Read the format marker from json_schema_extra, looking inside Optional[Annotated[...]]."""
    if isinstance(extra, dict):
        fmt = extra.get("format")
        if isinstance(fmt, str):
            return fmt

    for arg in get_args(annotation):
        fmt = _annotated_format(getattr(arg, "__metadata__", ()))
        if fmt is not None:
            return fmt
    return None


def _annotated_format(metadata: tuple[Any, ...]) -> str | None:
    for meta in metadata:
        if isinstance(meta, FieldInfo) and isinstance(meta.json_schema_extra, dict):
            fmt = meta.json_schema_extra.get("format")
            if isinstance(fmt, str):
                return fmt
    return None


def extract_constraints(metadata: list[Any] | tuple[Any, ...]) -> dict[str, Any]:
    """Extract HTML constraint attributes from annotated-types metadata."""
    attrs: dict[str, Any] = {}

    for meta in metadata:
        # Numeric constraints
        if isinstance(meta, Ge):
            attrs["min"] = meta.ge
        if isinstance(meta, Gt):
            # HTML has no exclusive min
            attrs["min"] = meta.gt
        if isinstance(meta, Le):
            attrs["max"] = meta.le
        if isinstance(meta, Lt):
            # HTML has no exclusive max
            attrs["max"] = meta.lt

        # String length constraints
        if isinstance(meta, MinLen):
            attrs["minlength"] = meta.min_length
        if isinstance(meta, MaxLen):
            attrs["maxlength"] = meta.max_length

        if isinstance(meta, MultipleOf):
            attrs["step"] = meta.multiple_of

    return attrs


def datetime_min_max_attrs(core_type: Any) -> dict[str, str]:
    """Get min/max attributes for Pydantic date/datetime constraint types."""
    attrs = {}
    today = date.today()
    now = datetime.now()

    if core_type is PastDate:
        # max = today (HTML5 date input uses YYYY-MM-DD)
        attrs["max"] = today.isoformat()
    elif core_type is FutureDate:
        attrs["min"] = today.isoformat()
    elif core_type is PastDatetime:
        # max = now (datetime-local uses YYYY-MM-DDTHH:MM)
        attrs["max"] = now.strftime("%Y-%m-%dT%H:%M")
    elif core_type is FutureDatetime:
        attrs["min"] = now.strftime("%Y-%m-%dT%H:%M")

    return attrs


# Associations

def association_info(record: Any, name: str) -> AssociationInfo:
    """
    Describe the relation ``name`` of a Django model record.

    Raises ValueError when there is no record to take the relation from.
    """
    if record is None:
        raise ValueError(
            f"Association inputs need a record to read {name!r} from, "
            "but the form was built from a name only."
        )
    if not isinstance(record, models.Model):
        raise ValueError(
            f"Association inputs require a Django model instance, got {type(record).__name__}."
        )

    try:
        field = record._meta.get_field(name)
    except FieldDoesNotExist:
        raise ValueError(
            f"{type(record).__name__} has no association named {name!r}."
        ) from None

    if not field.is_relation or not (field.concrete or field.many_to_many):
        raise ValueError(f"{type(record).__name__}.{name} is not an association.")

    if field.many_to_many:
        return AssociationInfo(name=name, attname=name, related_model=field.related_model, multiple=True)

    return AssociationInfo(name=name, attname=field.attname, related_model=field.related_model)


# Errors

def collect_errors(source: Any) -> dict[str, list[str]]:
    """
    Normalize pre-computed validation errors to {attribute: [message, ...]}.

    Accepts a mapping (including a Django form's ErrorDict), a Django
    ValidationError or a Pydantic ValidationError. Errors that do not belong
    to an attribute are stored under NON_FIELD_ERRORS.
    """
    if source is None:
        return {}

    if isinstance(source, PydanticValidationError):
        errors: dict[str, list[str]] = {}
        for err in source.errors():
            field_name, message = convert_pydantic_error(err)
            errors.setdefault(field_name or NON_FIELD_ERRORS, []).append(message)
        return errors

    if isinstance(source, DjangoValidationError):
        if hasattr(source, "error_dict"):
            return {name: list(messages) for name, messages in source.message_dict.items()}
        return {NON_FIELD_ERRORS: list(source.messages)}

    if isinstance(source, Mapping):
        errors = {}
        for name, messages in source.items():
            if isinstance(messages, (str, Promise)):
                errors[str(name)] = [str(messages)]
            else:
                errors[str(name)] = [str(message) for message in messages]
        return errors

    raise TypeError(
        f"Cannot read validation errors from {type(source).__name__}; "
        "pass a mapping, a Django ValidationError or a Pydantic ValidationError."
    )


def convert_pydantic_error(error: ErrorDetails) -> tuple[str | None, str]:
    """
    Convert a Pydantic error dict to (field_name, message).

    Error location handling:
    - Single field in loc: Error attaches to that field
    - Empty loc or '__root__': Non-field error
    - Nested loc: Uses first element as field name
    """
    loc = error.get("loc", ())
    if loc and loc[0] != "__root__":
        field_name: str | None = str(loc[0])
    else:
        field_name = None

    error_type = error.get("type", "value_error")
    ctx = error.get("ctx", {})

    # Custom ValueError messages from validators are kept as written
    if error_type in PYDANTIC_ERROR_MESSAGES:
        message = PYDANTIC_ERROR_MESSAGES[error_type]
        try:
            message = message.format(**ctx)
        except KeyError:
            pass
    else:
        message = error.get("msg", "is invalid")

    return field_name, message
