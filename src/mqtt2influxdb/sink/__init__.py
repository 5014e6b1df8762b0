from .influx import InfluxSink, to_point

__all__ = ["InfluxSink", "to_point"]
