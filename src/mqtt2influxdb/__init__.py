"""
mqtt2influxdb: forward MQTT messages to InfluxDB 2.

Exports the public API:
- ExtractionEngine
- load_configuration
"""
from .mapping.engine import ExtractionEngine
from .config import load_configuration

__version__ = "0.1.0"
