from __future__ import annotations

import logging
from typing import Any, Optional

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS
from influxdb_client.rest import ApiException
from urllib3.exceptions import HTTPError

from mqtt2influxdb.mapping.types import Record

logger = logging.getLogger(__name__)


def to_point(record: Record) -> Point:
    """Measurement = record name; tags rendered as text, fields as raw values."""
    point = Point(record.name)
    for name, value in record.tags.items():
        point.tag(name, value.as_tag())
    for name, value in record.fields.items():
        point.field(name, value.value)
    return point


class InfluxSink:
    """Synchronous, one-point-per-record writer for an InfluxDB 2 bucket."""

    def __init__(
        self,
        url: str,
        bucket: str,
        org: str,
        token: str,
        *,
        client: Optional[Any] = None,
    ) -> None:
        self.url = url
        self.bucket = bucket
        self.org = org
        self.client = client or InfluxDBClient(url=url, token=token, org=org)
        self.write_api = self.client.write_api(write_options=SYNCHRONOUS)

    def ping(self) -> bool:
        ok = bool(self.client.ping())
        if ok:
            logger.info("Successfully pinged InfluxDB")
        else:
            logger.error("Failed to ping InfluxDB at %s", self.url)
        return ok

    def write(self, record: Record) -> bool:
        if not record.fields:
            logger.warning("Record %s has no fields; not written", record.name)
            return False

        try:
            self.write_api.write(
                bucket=self.bucket,
                org=self.org,
                record=to_point(record),
                write_precision=WritePrecision.MS,
            )
        except (ApiException, HTTPError) as e:
            logger.error("Failed to write %s to InfluxDB: %s", record.name, e)
            return False
        return True

    def close(self) -> None:
        self.write_api.close()
        self.client.close()
