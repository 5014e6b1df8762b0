from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class Mqtt2InfluxError(Exception):
    """Base class for errors raised by mqtt2influxdb."""


class ConfigError(Mqtt2InfluxError):
    """
    The mapping document could not be read or does not describe a valid
    entry table. Raised once, at startup.
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self.message = message
        super().__init__(f"{self.path}: {message}" if self.path else message)


class PayloadDecodeError(Mqtt2InfluxError):
    """
    A payload is not valid UTF-8 (single_text) or not a valid JSON
    document (json). Only the offending message is dropped.
    """

    def __init__(
        self,
        reason: str,
        *,
        topic: Optional[str] = None,
        entry_name: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.topic = topic
        self.entry_name = entry_name
        super().__init__(reason)

    def __str__(self) -> str:
        if self.topic is None:
            return self.reason
        return f"{self.topic} -> {self.entry_name}: {self.reason}"


class UnsupportedValue(Mqtt2InfluxError):
    """A resolved JSON value has no TypedValue representation (JSON null)."""
