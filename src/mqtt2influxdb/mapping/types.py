from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple


class DstVariant(Enum):
    """Where an extracted value lands in the output record."""

    FIELD = "field"
    TAG = "tag"

    @classmethod
    def parse(cls, raw: Any) -> "DstVariant":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(
                f"dst_variant must be one of 'field' or 'tag'; got {raw!r}"
            ) from None


# ---------------------------------------------------------------------------
# TypedValue: Boolean | Float | String
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TypedValue:
    value: Any

    def __new__(cls, *args, **kwargs):
        if cls is TypedValue:
            raise TypeError("TypedValue is abstract; use Boolean, Float or String")
        return super().__new__(cls)

    def as_tag(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean(TypedValue):
    value: bool

    def as_tag(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Float(TypedValue):
    value: float

    def as_tag(self) -> str:
        # 21.0 -> "21", matching the line protocol rendering of the field
        v = float(self.value)
        if math.isfinite(v) and v.is_integer():
            return str(int(v))
        return repr(v)


@dataclass(frozen=True)
class String(TypedValue):
    value: str

    def as_tag(self) -> str:
        return self.value


class Extracted(NamedTuple):
    name: str
    variant: DstVariant
    value: TypedValue


class SkippedField(NamedTuple):
    name: str
    src_path: str
    reason: str


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

@dataclass
class Record:
    """
    Output of one extraction: a measurement name plus its field and tag
    values. Built fresh for every message.
    """

    name: str
    fields: Dict[str, TypedValue] = field(default_factory=dict)
    tags: Dict[str, TypedValue] = field(default_factory=dict)
    skipped: List[SkippedField] = field(default_factory=list)

    def apply(self, name: str, variant: DstVariant, value: TypedValue) -> None:
        # duplicate names overwrite; last write wins
        if variant is DstVariant.FIELD:
            self.fields[name] = value
        elif variant is DstVariant.TAG:
            self.tags[name] = value
        else:
            raise TypeError(f"Unsupported destination variant: {variant!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": {k: v.value for k, v in self.fields.items()},
            "tags": {k: v.value for k, v in self.tags.items()},
            "skipped": [s._asdict() for s in self.skipped],
        }
