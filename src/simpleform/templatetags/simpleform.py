"""
Template tags exposing FormBuilder operations.

    {% load simpleform %}
    <form method="post">
      {% simple_form_input builder "name" hint="Your full name" %}
      {% simple_form_association builder "company" %}
      {% simple_form_button builder "submit" %}
    </form>

``builder`` is a FormBuilder put in the template context by the view. Since
``as`` is a reserved word in template tag arguments, use ``input_type``.
"""

from django import template

register = template.Library()


def _options(kwargs):
    if "input_type" in kwargs:
        kwargs["as"] = kwargs.pop("input_type")
    return kwargs


@register.simple_tag
def simple_form_input(builder, attribute, **kwargs):
    return builder.input(attribute, **_options(kwargs))


@register.simple_tag
def simple_form_association(builder, name, **kwargs):
    return builder.association(name, **_options(kwargs))


@register.simple_tag
def simple_form_button(builder, kind="submit", label=None, **kwargs):
    return builder.button(kind, label, **kwargs)
