"""Port interfaces for feed sources, caches and sinks.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from typing import Protocol, runtime_checkable

from kpline.core.encoding.line_protocol import Measurement


@runtime_checkable
class FeedSourcePort(Protocol):
    """Port for retrieving the raw feed text.

    Examples: HttpFeedSource, FileFeedSource.
    """

    def fetch(self) -> str:
        """Return the complete feed text."""
        ...


@runtime_checkable
class FeedCachePort(Protocol):
    """Port for keeping the raw feed text between runs.

    The cached text is opaque; it is parsed the same way as a fresh
    download. Example: FileFeedCache.
    """

    def load(self) -> str | None:
        """Return the cached text, or None if nothing has been cached."""
        ...

    def store(self, text: str) -> None:
        """Replace the cached text."""
        ...


@runtime_checkable
class MeasurementSinkPort(Protocol):
    """Port for delivering encoded measurements.

    Examples: StreamSink, InMemorySink, InfluxHttpSink.
    """

    def write(self, measurement: Measurement) -> None:
        """Accept one measurement."""
        ...

    def flush(self) -> None:
        """Deliver anything still buffered."""
        ...
