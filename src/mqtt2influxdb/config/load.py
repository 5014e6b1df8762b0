from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from mqtt2influxdb.errors import ConfigError
from mqtt2influxdb.mapping.spec import (
    Configuration,
    Entry,
    FieldSpec,
    JsonField,
    JsonFields,
    SingleText,
)

from .schema import ConfigurationModel, JsonEntryModel, SingleTextEntryModel


def _format_validation_error(err: ValidationError) -> str:
    lines: List[str] = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()))
        lines.append(f"{loc or '<root>'}: {e.get('msg')}")
    return "; ".join(lines)


def _to_field_spec(model: Union[SingleTextEntryModel, JsonEntryModel]) -> FieldSpec:
    if isinstance(model, SingleTextEntryModel):
        return SingleText(dst_name=model.dst_name, dst_variant=model.dst_variant)
    return JsonFields(
        fields=tuple(
            JsonField(
                src_path=f.src_path,
                dst_variant=f.dst_variant,
                dst_name=f.dst_name,
            )
            for f in model.fields
        )
    )


def build_configuration(doc: Dict[str, Any]) -> Configuration:
    """
    Validate a decoded mapping document and turn it into the immutable
    entry table used by the extraction engine.

    Expected shape:

    entries:
      - src_topic: sensors/+/temp
        dst_name: temperature
        type: json
        fields:
          - { src_path: value, dst_name: celsius }
          - { src_path: unit, dst_variant: tag }
      - src_topic: house/door
        dst_name: door
        type: single_text
    """
    if not isinstance(doc, dict):
        raise ConfigError("mapping document must be a mapping with an 'entries' list")

    try:
        model = ConfigurationModel.model_validate(doc)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e

    entries = tuple(
        Entry(
            src_topic=m.src_topic,
            dst_name=m.dst_name,
            field_spec=_to_field_spec(m),
        )
        for m in model.entries
    )
    return Configuration(entries=entries)


def load_configuration(path: Path) -> Configuration:
    path = Path(path).expanduser().resolve()
    if not path.is_file():
        raise ConfigError("configuration file not found", path)

    try:
        with path.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path) from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"file is not valid UTF-8: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"cannot read file: {e}", path) from e

    try:
        return build_configuration(doc)
    except ConfigError as e:
        raise ConfigError(e.message, path) from e
