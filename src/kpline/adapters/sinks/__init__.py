"""Measurement sink adapters implementing core ports."""

from kpline.adapters.sinks.in_memory import InMemorySink
from kpline.adapters.sinks.influx import InfluxHttpSink
from kpline.adapters.sinks.stream import StreamSink

__all__ = [
    "InMemorySink",
    "InfluxHttpSink",
    "StreamSink",
]
