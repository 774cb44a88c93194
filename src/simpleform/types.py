"""
Value types shared by the introspection and rendering layers.

AttributeInfo is the view-layer reflection of a single model attribute, built
by simpleform.metadata from a Django model field, a Pydantic FieldInfo or a
dataclass field. WidgetSpec is what the inference step decides to render for
that attribute once the caller's overrides are applied.

Usage:
    from pydantic import BaseModel
    from simpleform import Text

    class Article(BaseModel):
        title: str
        body: Text  # rendered as a <textarea>
"""

from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import Field


@dataclass(frozen=True)
class AttributeInfo:
    """
    Column metadata for one attribute.

    Attributes:
        name: Attribute name on the record
        column_type: Normalized column type ("string", "text", "boolean",
            "integer", "float", "decimal", "date", "time", "datetime",
            "email", "url", "password") or None when unknown
        required: Whether the column rejects blank values, None when unknown
        human_name: Human readable attribute name from the model, if any
        choices: (value, label) pairs when the column is restricted to a set
        max_length: Maximum length for string columns
        widget_attrs: HTML attributes derived from column constraints
    """

    name: str
    column_type: str | None = None
    required: bool | None = None
    human_name: str | None = None
    choices: list[tuple[Any, str]] | None = None
    max_length: int | None = None
    widget_attrs: dict[str, Any] = field(default_factory=dict)


@dataclass
class WidgetSpec:
    """The control chosen for an attribute."""

    input_type: str
    required: bool
    collection: list[tuple[Any, str]] | None = None
    include_blank: bool = True
    multiple: bool = False
    attrs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AssociationInfo:
    """A foreign key or many-to-many relation on a Django model."""

    name: str
    attname: str
    related_model: Any
    multiple: bool = False


# Marker type for long text attributes.
# Maps to a <textarea> instead of a text input.
Text = Annotated[str, Field(json_schema_extra={"format": "text"})]
