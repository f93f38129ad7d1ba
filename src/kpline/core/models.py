"""Core domain models for the Kp/ap nowcast feed.

The feed is a whitespace separated table published by GFZ Potsdam, one
three-hour bin per line::

    # YYY MM DD hh.h hh._m days days_m Kp ap D
    2022 07 31 18.0 19.50 33084.75000 33084.81250 2.000 7 1

Lines are in ascending time order. Bins whose values are not yet known
carry ``-1`` for Kp and ap.
"""

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from kpline.core.errors import (
    NumericParseError,
    ParseError,
    ParseIoError,
    StructuralError,
)
from kpline.core.values import Float, Signed

COMMENT_PREFIX = "#"

COLUMNS = (
    "year",
    "month",
    "day",
    "hour",
    "hour_mid",
    "days",
    "days_mid",
    "kp",
    "ap",
    "definitive",
)

# Bin timestamp is taken from the mid-bin hour column
_HOUR_COLUMN = 4
_KP_COLUMN = 7
_AP_COLUMN = 8
_DEFINITIVE_COLUMN = 9


def _parse_int(tokens: Sequence[str], index: int) -> int:
    try:
        return int(tokens[index])
    except ValueError as exc:
        raise NumericParseError(COLUMNS[index], tokens[index], str(exc)) from exc


def _parse_float(tokens: Sequence[str], index: int) -> float:
    try:
        value = float(tokens[index])
    except ValueError as exc:
        raise NumericParseError(COLUMNS[index], tokens[index], str(exc)) from exc
    if not math.isfinite(value):
        raise NumericParseError(COLUMNS[index], tokens[index], "not a finite number")
    return value


def _check_field(tokens: Sequence[str], index: int, variant: type, value):
    """Reject a value that its line-protocol field type cannot hold."""
    try:
        variant(value)
    except ValueError as exc:
        raise NumericParseError(COLUMNS[index], tokens[index], str(exc)) from exc
    return value


@dataclass(frozen=True)
class Entry:
    """One three-hour bin of the nowcast feed.

    Attributes:
        date: Mid-bin time of the reading as a naive UTC datetime.
        kp: Planetary Kp index; negative when not yet available.
        ap: Planetary ap index; negative when not yet available.
        definitive: 1 for a definitive reading, 0 for a provisional one.
    """

    date: datetime
    kp: float
    ap: int
    definitive: int

    @property
    def is_definitive(self) -> bool:
        return self.definitive == 1

    @property
    def is_available(self) -> bool:
        """False for placeholder rows published before the values exist."""
        return self.kp >= 0 and self.ap >= 0

    @classmethod
    def parse(cls, line: str) -> "Entry":
        """Parse one feed line. See ``parse_entry``."""
        return parse_entry(line)

    def __str__(self) -> str:
        return (
            f"Time = {self.date}, Kp = {Float(self.kp)}, "
            f"ap = {self.ap}, d = {self.definitive}"
        )


def parse_entry(line: str) -> Entry:
    """Parse one data line of the feed.

    The fractional mid-bin hour is split into whole hours and minutes
    (remainder times 60, truncated); seconds are always zero.

    Args:
        line: A data line with exactly ten whitespace separated columns.

    Returns:
        The parsed entry. Sentinel values are kept as they are.

    Raises:
        StructuralError: If the line does not have ten columns.
        NumericParseError: If a column is not a valid number, kp does
            not fit a 32-bit float, ap does not fit a 128-bit integer, or
            the columns do not form a real calendar date and time.
    """
    tokens = line.split()
    if len(tokens) != len(COLUMNS):
        raise StructuralError(
            f"expected {len(COLUMNS)} columns, found {len(tokens)}"
        )

    year = _parse_int(tokens, 0)
    month = _parse_int(tokens, 1)
    day = _parse_int(tokens, 2)
    fractional_hour = _parse_float(tokens, _HOUR_COLUMN)
    hours = math.floor(fractional_hour)
    minutes = int((fractional_hour - hours) * 60)
    try:
        date = datetime(year, month, day, hours, minutes, 0)
    except (ValueError, OverflowError) as exc:
        token = " ".join(tokens[:3] + tokens[_HOUR_COLUMN : _HOUR_COLUMN + 1])
        raise NumericParseError("date", token, str(exc)) from exc

    kp = _check_field(tokens, _KP_COLUMN, Float, _parse_float(tokens, _KP_COLUMN))
    ap = _check_field(tokens, _AP_COLUMN, Signed, _parse_int(tokens, _AP_COLUMN))
    return Entry(
        date=date,
        kp=kp,
        ap=ap,
        definitive=_parse_int(tokens, _DEFINITIVE_COLUMN),
    )


@dataclass(frozen=True)
class Snapshot:
    """The parsed content of one copy of the feed.

    Attributes:
        entries: Available entries in file order (ascending by date).
        last_final_index: Position of the latest definitive entry, or None
            if no entry is definitive.
    """

    entries: tuple[Entry, ...] = field(default_factory=tuple)
    last_final_index: int | None = None

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    @classmethod
    def parse(cls, text: str) -> "Snapshot":
        """Parse a whole feed text.

        Blank lines and ``#`` comments are skipped. Entries whose Kp or ap
        is negative are dropped. The first malformed line aborts the parse.

        Raises:
            ParseError: For the first line that fails to parse, with
                ``lineno`` set to its 1-based line number.
        """
        entries: list[Entry] = []
        last_final_index = None
        for lineno, raw_line in enumerate(text.split("\n"), start=1):
            line = raw_line.strip()
            if not line or line.startswith(COMMENT_PREFIX):
                continue
            try:
                entry = parse_entry(line)
            except ParseError as exc:
                exc.lineno = lineno
                raise

            if not entry.is_available:
                continue
            if entry.is_definitive:
                last_final_index = len(entries)
            entries.append(entry)

        return cls(entries=tuple(entries), last_final_index=last_final_index)

    @classmethod
    def from_stream(cls, stream: TextIO) -> "Snapshot":
        """Read a text stream to the end and parse it.

        Raises:
            ParseIoError: If reading the stream fails.
            ParseError: If the text is malformed.
        """
        try:
            text = stream.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseIoError(f"failed to read feed: {exc}") from exc
        return cls.parse(text)

    @property
    def last(self) -> Entry | None:
        return self.entries[-1] if self.entries else None

    @property
    def last_final(self) -> Entry | None:
        """The latest definitive entry, or None."""
        if self.last_final_index is None:
            return None
        return self.entries[self.last_final_index]

    def new_entries_since(self, previous: "Snapshot") -> Sequence[Entry]:
        """Entries of this snapshot that are newer than previous. See
        ``get_new_entries``."""
        return get_new_entries(self, previous)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __str__(self) -> str:
        last = "none" if self.last is None else str(self.last)
        return f"{len(self.entries)} entries, last entry: {last}"


def get_new_entries(current: Snapshot, previous: Snapshot) -> Sequence[Entry]:
    """Return the entries of current that previous has not seen yet.

    The date of previous's last entry is the watermark. The result is the
    run of current's entries starting at the first one dated strictly
    after it. Both snapshots must be in ascending date order; otherwise
    the result is unspecified.

    Args:
        current: The freshly parsed snapshot.
        previous: The snapshot from the previous run, possibly empty.

    Returns:
        A tuple slice of current's entries: all of them when previous is
        empty, none when nothing is newer than the watermark.
    """
    if not previous.entries:
        return current.entries

    watermark = previous.entries[-1].date
    for index, entry in enumerate(current.entries):
        if entry.date > watermark:
            return current.entries[index:]
    return ()
