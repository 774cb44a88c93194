from importlib.metadata import PackageNotFoundError, version

from .builder import FormBuilder, simple_form_for
from .inference import default_input_type, infer_widget
from .inputs import register_input
from .types import AttributeInfo, Text, WidgetSpec

try:
    __version__ = version("django-simpleform")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "FormBuilder",
    "simple_form_for",
    "default_input_type",
    "infer_widget",
    "register_input",
    "AttributeInfo",
    "Text",
    "WidgetSpec",
    "__version__",
]
