"""One ingest run: fetch, diff against the cache, emit, update the cache."""

import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from kpline.core.adapter import DEFAULT_MEASUREMENT_NAME, entry_to_measurement
from kpline.core.models import Entry, Snapshot, get_new_entries
from kpline.core.ports import FeedCachePort, FeedSourcePort, MeasurementSinkPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one ingest run.

    Attributes:
        current_count: Entries in the freshly fetched feed.
        cached_count: Entries in the cached feed (0 without a cache).
        new_entries: Entries newer than the cached feed, in order.
        written: Measurements handed to the sink (0 in diagnostic mode).
        cache_updated: Whether the fetched text was stored in the cache.
    """

    current_count: int
    cached_count: int
    new_entries: tuple[Entry, ...] = field(default_factory=tuple)
    written: int = 0
    cache_updated: bool = False

    @property
    def new_count(self) -> int:
        return len(self.new_entries)


def load_cached_snapshot(cache: FeedCachePort | None) -> Snapshot:
    """Parse the cached feed text, or return an empty snapshot."""
    if cache is None:
        return Snapshot.empty()
    text = cache.load()
    if text is None:
        return Snapshot.empty()
    return Snapshot.parse(text)


def _write_diagnostics(
    out: TextIO, current: Snapshot, cached: Snapshot, new_entries: Sequence[Entry]
) -> None:
    out.write(f"Downloaded Kp file: {current}\n")
    out.write(f"Cached Kp file: {cached}\n")
    for entry in new_entries:
        out.write(f"{entry}\n")


def run_ingest(
    source: FeedSourcePort,
    sink: MeasurementSinkPort,
    cache: FeedCachePort | None = None,
    measurement_name: str = DEFAULT_MEASUREMENT_NAME,
    diagnostic: bool = False,
    out: TextIO | None = None,
) -> IngestResult:
    """Emit the feed entries that were not seen on the previous run.

    The fetched text is parsed and compared against the cached text from
    the previous run. Each new entry becomes one measurement written to
    the sink, then the fetched text replaces the cache. Nothing is cached
    when fetching or parsing fails.

    Args:
        source: Where to fetch the current feed text.
        sink: Where to write measurements.
        cache: Raw-text cache of the previous run, or None to treat every
            entry as new and keep nothing.
        measurement_name: Name of the emitted measurements.
        diagnostic: Print snapshot summaries and new entries to ``out``
            instead of writing measurements.
        out: Stream for diagnostic text (default: stdout).

    Returns:
        Counts and the new entries of this run.

    Raises:
        KplineError: Any fetch, parse, sink or cache failure.
    """
    text = source.fetch()
    current = Snapshot.parse(text)
    logger.info("Parsed feed: %s", current)

    cached = load_cached_snapshot(cache)
    logger.info("Parsed cache: %s", cached)

    new_entries = tuple(get_new_entries(current, cached))
    logger.info(
        "%d new entries",
        len(new_entries),
        extra={"current_count": len(current), "cached_count": len(cached)},
    )

    written = 0
    if diagnostic:
        _write_diagnostics(out or sys.stdout, current, cached, new_entries)
    else:
        for entry in new_entries:
            sink.write(entry_to_measurement(entry, measurement_name))
            written += 1
        sink.flush()

    cache_updated = False
    if cache is not None:
        cache.store(text)
        cache_updated = True

    return IngestResult(
        current_count=len(current),
        cached_count=len(cached),
        new_entries=new_entries,
        written=written,
        cache_updated=cache_updated,
    )
