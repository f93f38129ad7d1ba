"""kpline: GFZ Kp/ap nowcast feed to InfluxDB line protocol.

Example:
    ```python
    from kpline import Snapshot, entry_to_measurement, get_new_entries

    current = Snapshot.parse(downloaded_text)
    previous = Snapshot.parse(cached_text)
    for entry in get_new_entries(current, previous):
        print(entry_to_measurement(entry))
    ```
"""

from kpline.adapters.sinks import InfluxHttpSink, InMemorySink, StreamSink
from kpline.adapters.sources import (
    DEFAULT_NOWCAST_URL,
    FileFeedCache,
    FileFeedSource,
    HttpFeedSource,
)
from kpline.config import Settings
from kpline.core.adapter import DEFAULT_MEASUREMENT_NAME, entry_to_measurement
from kpline.core.encoding.escaping import escape
from kpline.core.encoding.line_protocol import (
    Measurement,
    TimestampPrecision,
    encode_lines,
    write_line_protocol,
)
from kpline.core.errors import (
    CacheError,
    ConfigError,
    FeedFetchError,
    FormatError,
    KplineError,
    NumericParseError,
    ParseError,
    ParseIoError,
    SinkError,
    StructuralError,
)
from kpline.core.models import Entry, Snapshot, get_new_entries, parse_entry
from kpline.core.ports import FeedCachePort, FeedSourcePort, MeasurementSinkPort
from kpline.core.values import (
    Boolean,
    Double,
    Float,
    Signed,
    String,
    Unsigned,
    Value,
    render,
    to_value,
)
from kpline.ingest import IngestResult, run_ingest

__all__ = [
    # Models
    "Entry",
    "Snapshot",
    "parse_entry",
    "get_new_entries",
    # Values and encoding
    "Value",
    "Float",
    "Double",
    "Signed",
    "Unsigned",
    "String",
    "Boolean",
    "render",
    "to_value",
    "escape",
    "Measurement",
    "TimestampPrecision",
    "encode_lines",
    "write_line_protocol",
    "entry_to_measurement",
    "DEFAULT_MEASUREMENT_NAME",
    # Ports
    "FeedSourcePort",
    "FeedCachePort",
    "MeasurementSinkPort",
    # Adapters
    "HttpFeedSource",
    "FileFeedSource",
    "FileFeedCache",
    "DEFAULT_NOWCAST_URL",
    "StreamSink",
    "InMemorySink",
    "InfluxHttpSink",
    # Runner and config
    "run_ingest",
    "IngestResult",
    "Settings",
    # Errors
    "KplineError",
    "ParseError",
    "StructuralError",
    "NumericParseError",
    "ParseIoError",
    "FormatError",
    "FeedFetchError",
    "CacheError",
    "SinkError",
    "ConfigError",
]
