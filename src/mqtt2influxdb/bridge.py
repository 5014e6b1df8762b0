from __future__ import annotations

import logging
from typing import Any, Optional

from mqtt2influxdb.errors import PayloadDecodeError
from mqtt2influxdb.mapping.engine import ExtractionEngine
from mqtt2influxdb.mapping.types import Record

logger = logging.getLogger(__name__)


class Bridge:
    """
    Pushes each transport message through the extraction engine and hands
    the resulting record to the sink. A bad message is logged and dropped;
    it never stops the loop.
    """

    def __init__(self, engine: ExtractionEngine, sink: Any) -> None:
        self.engine = engine
        self.sink = sink

    def on_message(self, topic: str, payload: bytes) -> Optional[Record]:
        try:
            result = self.engine.handle(topic, payload)
        except PayloadDecodeError as e:
            logger.error("Dropping message: %s", e)
            return None

        if result is None:
            return None

        record, entry = result
        logger.info("Received %s (rule %s) -> %s", topic, entry.src_topic, record)
        self.sink.write(record)
        return record
