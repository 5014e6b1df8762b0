from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from mqtt2influxdb.errors import PayloadDecodeError, UnsupportedValue

from .coerce import coerce
from .path import resolve, split_path
from .types import DstVariant, Extracted, SkippedField, String


ExtractResult = Union[Extracted, SkippedField]


def _decode_text(payload: bytes) -> str:
    try:
        return bytes(payload).decode("utf-8")
    except UnicodeDecodeError as e:
        raise PayloadDecodeError(f"payload is not valid UTF-8: {e}") from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _decode_json(payload: bytes) -> Any:
    text = _decode_text(payload)
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise PayloadDecodeError(f"payload is not valid JSON: {e}") from e
    except RecursionError as e:
        raise PayloadDecodeError("payload is not valid JSON: nesting too deep") from e


# ---------------------------------------------------------------------------
# FieldSpec variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SingleText:
    """The whole payload, decoded as UTF-8, becomes one String value."""

    dst_name: str
    dst_variant: DstVariant = DstVariant.FIELD

    def extract(self, payload: bytes) -> List[ExtractResult]:
        text = _decode_text(payload)
        return [Extracted(self.dst_name, self.dst_variant, String(text))]


@dataclass(frozen=True)
class JsonField:
    src_path: str
    dst_variant: DstVariant = DstVariant.FIELD
    dst_name: Optional[str] = None

    @property
    def target_name(self) -> str:
        return self.dst_name if self.dst_name is not None else self.src_path

    def path_segments(self) -> List[str]:
        return split_path(self.src_path)


@dataclass(frozen=True)
class JsonFields:
    """The payload is a JSON document; each JsonField picks one value out."""

    fields: Tuple[JsonField, ...] = ()

    def extract(self, payload: bytes) -> List[ExtractResult]:
        doc = _decode_json(payload)

        out: List[ExtractResult] = []
        for f in self.fields:
            value = resolve(doc, f.path_segments())
            try:
                typed = coerce(value)
            except UnsupportedValue as e:
                out.append(SkippedField(f.target_name, f.src_path, str(e)))
                continue
            out.append(Extracted(f.target_name, f.dst_variant, typed))
        return out


FieldSpec = Union[SingleText, JsonFields]


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Entry:
    """One rule: topic pattern -> measurement name + extraction strategy."""

    src_topic: str
    dst_name: str
    field_spec: FieldSpec


@dataclass(frozen=True)
class Configuration:
    entries: Tuple[Entry, ...] = field(default_factory=tuple)

    def topics(self) -> List[str]:
        """Distinct src_topic patterns, in configured order."""
        seen: List[str] = []
        for e in self.entries:
            if e.src_topic not in seen:
                seen.append(e.src_topic)
        return seen
