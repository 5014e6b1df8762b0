# mqtt2influxdb/config/schema.py

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from mqtt2influxdb.mapping.topic import validate_pattern
from mqtt2influxdb.mapping.types import DstVariant

# accepts "field" / "Field" / "tag" / "Tag"
Variant = Annotated[DstVariant, BeforeValidator(DstVariant.parse)]


class JsonFieldModel(BaseModel):
    # One value picked out of a JSON payload
    src_path: str
    dst_variant: Variant = Field(default=DstVariant.FIELD)
    dst_name: Optional[str] = None


class _EntryBase(BaseModel):
    src_topic: str
    dst_name: str

    @field_validator("src_topic")
    @classmethod
    def _check_pattern(cls, v: str) -> str:
        validate_pattern(v)
        return v


class SingleTextEntryModel(_EntryBase):
    # dst_name names both the measurement and its single value
    type: Literal["single_text"]
    dst_variant: Variant = Field(default=DstVariant.FIELD)


class JsonEntryModel(_EntryBase):
    type: Literal["json"]
    fields: List[JsonFieldModel]


EntryModel = Annotated[
    Union[SingleTextEntryModel, JsonEntryModel],
    Field(discriminator="type"),
]


class ConfigurationModel(BaseModel):
    # Schema for the mapping document
    entries: List[EntryModel]
