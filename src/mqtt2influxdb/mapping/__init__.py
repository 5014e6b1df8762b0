from . import types
from . import topic
from . import path
from . import coerce
from . import spec
from . import engine

from .engine import ExtractionEngine, handle
from .spec import Configuration, Entry, JsonField, JsonFields, SingleText
from .types import Boolean, DstVariant, Float, Record, String, TypedValue

__all__ = [
    "types",
    "topic",
    "path",
    "coerce",
    "spec",
    "engine",
    "ExtractionEngine",
    "handle",
    "Configuration",
    "Entry",
    "JsonField",
    "JsonFields",
    "SingleText",
    "Boolean",
    "DstVariant",
    "Float",
    "Record",
    "String",
    "TypedValue",
]
