from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from mqtt2influxdb.bridge import Bridge
from mqtt2influxdb.config import load_configuration
from mqtt2influxdb.errors import ConfigError, PayloadDecodeError
from mqtt2influxdb.mapping.engine import ExtractionEngine
from mqtt2influxdb.mapping.spec import Configuration, JsonFields, SingleText
from mqtt2influxdb.sink.influx import InfluxSink
from mqtt2influxdb.transport.mqtt import MqttSource

app = typer.Typer(help="mqtt2influxdb CLI")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", envvar="LOG_LEVEL", help="Logging level"),
):
    """Forward MQTT messages to InfluxDB 2 using per-topic mapping rules."""
    level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{log_level}'")
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _load_or_exit(config: Path) -> Configuration:
    try:
        return load_configuration(config)
    except ConfigError as e:
        typer.secho(f"Invalid configuration: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _describe(spec) -> str:
    if isinstance(spec, SingleText):
        return f"single_text {spec.dst_variant.value}={spec.dst_name}"
    if isinstance(spec, JsonFields):
        parts = [
            f"{f.dst_variant.value}:{f.target_name}<-{f.src_path}" for f in spec.fields
        ]
        return "json " + (", ".join(parts) if parts else "(no fields)")
    return type(spec).__name__


# -----------------------------
# Bridge
# -----------------------------

@app.command()
def run(
    mqtt_url: str = typer.Option("mqtt://localhost", "--mqtt-url", envvar="MQTT_URL",
                                 help="Url for the MQTT server to connect to"),
    mqtt_client_id: str = typer.Option("mqtt2influxdb", "--mqtt-client-id", envvar="MQTT_CLIENT_ID",
                                       help="Client ID used to identify with the MQTT server"),
    influxdb_url: str = typer.Option("http://localhost:8086", "--influxdb-url", envvar="INFLUXDB_URL",
                                     help="Url for the InfluxDB2 server"),
    influxdb_bucket: str = typer.Option(..., "--influxdb-bucket", envvar="INFLUXDB_BUCKET",
                                        help="InfluxDB2 bucket to write all the data to"),
    influxdb_org: str = typer.Option(..., "--influxdb-org", envvar="INFLUXDB_ORG",
                                     help="InfluxDB2 organization"),
    influxdb_jwt: str = typer.Option(..., "--influxdb-jwt", envvar="INFLUXDB_JWT",
                                     help="InfluxDB2 API token"),
    config: Path = typer.Option(..., "--config", envvar="CONFIG",
                                help="Mapping file translating MQTT messages to InfluxDB2 points"),
):
    """Subscribe to every configured topic and write the extracted points."""
    configuration = _load_or_exit(config)
    engine = ExtractionEngine(configuration.entries)

    try:
        source = MqttSource(mqtt_url, mqtt_client_id, configuration.topics())
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--mqtt-url")

    logger.debug("Connecting to InfluxDB server: %s", influxdb_url)
    sink = InfluxSink(influxdb_url, influxdb_bucket, influxdb_org, influxdb_jwt)
    sink.ping()

    bridge = Bridge(engine, sink)
    try:
        source.run_forever(bridge.on_message)
    except KeyboardInterrupt:
        typer.echo("Interrupted")
    finally:
        sink.close()


# -----------------------------
# Offline helpers
# -----------------------------

@app.command()
def check(
    config: Path = typer.Option(..., "--config", "-c", envvar="CONFIG", help="Mapping file to validate"),
):
    """Validate a mapping file and list its entries."""
    configuration = _load_or_exit(config)
    for i, entry in enumerate(configuration.entries, start=1):
        typer.echo(f"{i:>3}. {entry.src_topic} -> {entry.dst_name}: {_describe(entry.field_spec)}")
    typer.echo("Subscriptions: " + ", ".join(configuration.topics()))
    n = len(configuration.entries)
    typer.secho(f"OK: {n} entr{'y' if n == 1 else 'ies'}", fg=typer.colors.GREEN)


@app.command()
def extract(
    payload: Optional[str] = typer.Argument(None, help="Payload text (UTF-8)"),
    config: Path = typer.Option(..., "--config", "-c", envvar="CONFIG", help="Mapping file"),
    topic: str = typer.Option(..., "--topic", "-t", help="Topic the payload arrived on"),
    payload_file: Optional[Path] = typer.Option(None, "--payload-file", "-f", help="Read raw payload bytes from file"),
):
    """Run one message through the mapping rules and print the record as JSON."""
    if payload_file is not None:
        raw = payload_file.read_bytes()
    elif payload is not None:
        raw = payload.encode("utf-8")
    else:
        raise typer.BadParameter("Provide a PAYLOAD argument or --payload-file")

    configuration = _load_or_exit(config)
    engine = ExtractionEngine(configuration.entries)

    try:
        result = engine.handle(topic, raw)
    except PayloadDecodeError as e:
        typer.secho(f"Decode failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if result is None:
        typer.secho(f"No entry matches topic '{topic}'", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    record, _ = result
    typer.echo(json.dumps(record.to_dict(), indent=2))


if __name__ == "__main__":
    app()
