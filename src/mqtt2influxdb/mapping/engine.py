# mqtt2influxdb/mapping/engine.py

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from mqtt2influxdb.errors import PayloadDecodeError

from .spec import Entry
from .topic import find_entry
from .types import Extracted, Record, SkippedField

logger = logging.getLogger(__name__)


class ExtractionEngine:
    """
    Routes (topic, payload) pairs to the first matching Entry and turns the
    payload into a Record.

    The engine only reads its entry table, so a single instance can be
    shared between threads.
    """

    def __init__(self, entries: Iterable[Entry]) -> None:
        self.entries: Tuple[Entry, ...] = tuple(entries)

    def find_entry(self, topic: str) -> Optional[Entry]:
        return find_entry(topic, self.entries)

    def handle(self, topic: str, payload: bytes) -> Optional[Tuple[Record, Entry]]:
        entry = self.find_entry(topic)
        if entry is None:
            logger.debug("No entry matches topic %s; dropping message", topic)
            return None

        record = Record(name=entry.dst_name)

        try:
            results = entry.field_spec.extract(payload)
        except PayloadDecodeError as e:
            e.topic = topic
            e.entry_name = entry.dst_name
            raise

        for item in results:
            if isinstance(item, SkippedField):
                logger.warning(
                    "Skipping field %s (path %r) of %s from %s: %s",
                    item.name, item.src_path, entry.dst_name, topic, item.reason,
                )
                record.skipped.append(item)
                continue
            if isinstance(item, Extracted):
                record.apply(item.name, item.variant, item.value)

        return record, entry


def handle(
    topic: str,
    payload: bytes,
    entries: Iterable[Entry],
) -> Optional[Tuple[Record, Entry]]:
    return ExtractionEngine(entries).handle(topic, payload)
