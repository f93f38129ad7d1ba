"""Line-protocol encoder for measurements.

A line has the shape::

    name[,tag=value...] field=value[,field=value...][ timestamp]

Tags are written sorted by key, fields in the order they were added.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import TextIO

from kpline.core.encoding.escaping import FIELD_KEY, MEASUREMENT_NAME, TAG
from kpline.core.errors import FormatError
from kpline.core.values import Value, render, to_value

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimestampPrecision(Enum):
    """Unit of the trailing timestamp, as named by InfluxDB's write API."""

    NONE = "none"
    SECONDS = "s"
    MILLISECONDS = "ms"
    MICROSECONDS = "us"
    NANOSECONDS = "ns"


_UNITS_PER_MICROSECOND = {
    TimestampPrecision.MICROSECONDS: 1,
    TimestampPrecision.NANOSECONDS: 1000,
}

_MICROSECONDS_PER_UNIT = {
    TimestampPrecision.SECONDS: 1_000_000,
    TimestampPrecision.MILLISECONDS: 1000,
}


def epoch_timestamp(moment: datetime, precision: TimestampPrecision) -> int:
    """Convert a datetime to an integer offset from the Unix epoch.

    Naive datetimes are taken to be UTC. Coarser units round toward
    negative infinity.

    Args:
        moment: The point in time.
        precision: Unit of the result; must not be ``NONE``.

    Returns:
        Whole units since 1970-01-01T00:00:00Z.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    if precision in _UNITS_PER_MICROSECOND:
        return micros * _UNITS_PER_MICROSECOND[precision]
    if precision in _MICROSECONDS_PER_UNIT:
        return micros // _MICROSECONDS_PER_UNIT[precision]
    raise ValueError(f"precision {precision.value!r} has no timestamp unit")


class Measurement:
    """A named point with tags, fields and an optional timestamp.

    Builder methods return the measurement itself so calls can be chained::

        m = Measurement("iono_activity")
        m.add_value("kp", Float(2.0)).add_tag("def", "1").set_time(when)
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._time: datetime | None = None
        self._fields: dict[str, Value] = {}
        self._tags: dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def time(self) -> datetime | None:
        return self._time

    @property
    def fields(self) -> Mapping[str, Value]:
        """Fields in insertion order (read-only view)."""
        return MappingProxyType(self._fields)

    @property
    def tags(self) -> Mapping[str, str]:
        """Tags as stored (read-only view); encoding sorts them by key."""
        return MappingProxyType(self._tags)

    def set_time(self, moment: datetime) -> "Measurement":
        """Set the event timestamp."""
        self._time = moment
        return self

    def add_value(
        self,
        key: str,
        value: Value | bool | int | float | str,
        replace: bool = False,
    ) -> "Measurement":
        """Add a field.

        Args:
            key: Field key; surrounding whitespace is trimmed.
            value: A value variant, or a native object converted with
                ``to_value``.
            replace: Overwrite an existing field with the same key. When
                False an existing field is left untouched.
        """
        key = key.strip()
        if replace or key not in self._fields:
            self._fields[key] = to_value(value)
        return self

    def add_tag(self, key: str, value: str, replace: bool = False) -> "Measurement":
        """Add a tag.

        Args:
            key: Tag key; surrounding whitespace is trimmed.
            value: Tag value.
            replace: Overwrite an existing tag with the same key. When
                False an existing tag is left untouched.
        """
        key = key.strip()
        if replace or key not in self._tags:
            self._tags[key] = value
        return self

    def to_line_protocol(
        self, precision: TimestampPrecision = TimestampPrecision.MILLISECONDS
    ) -> str:
        """Encode the measurement as one line, without a trailing newline.

        Args:
            precision: Unit of the timestamp. With ``NONE``, or when no
                time is set, the timestamp is omitted.
        """
        parts = [MEASUREMENT_NAME.apply(self._name)]
        for key in sorted(self._tags):
            parts.append(f",{TAG.apply(key)}={TAG.apply(self._tags[key])}")

        parts.append(" ")
        parts.append(
            ",".join(
                f"{FIELD_KEY.apply(key)}={render(value)}"
                for key, value in self._fields.items()
            )
        )

        if self._time is not None and precision is not TimestampPrecision.NONE:
            parts.append(f" {epoch_timestamp(self._time, precision)}")

        return "".join(parts)

    def __str__(self) -> str:
        return self.to_line_protocol(TimestampPrecision.MILLISECONDS)

    def __repr__(self) -> str:
        return (
            f"Measurement(name={self._name!r}, time={self._time!r}, "
            f"fields={self._fields!r}, tags={self._tags!r})"
        )


def encode_lines(
    measurements: Iterable[Measurement],
    precision: TimestampPrecision = TimestampPrecision.MILLISECONDS,
) -> str:
    """Encode measurements to newline-terminated line protocol.

    Returns:
        One line per measurement, each ending in ``\\n``.
        Empty string if there are no measurements.
    """
    lines = [m.to_line_protocol(precision) for m in measurements]
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def write_line_protocol(
    measurements: Iterable[Measurement],
    stream: TextIO,
    precision: TimestampPrecision = TimestampPrecision.MILLISECONDS,
) -> int:
    """Write measurements to a text stream, one line each.

    Returns:
        Number of lines written.

    Raises:
        FormatError: If the stream rejects a write.
    """
    count = 0
    for measurement in measurements:
        line = measurement.to_line_protocol(precision)
        try:
            stream.write(line + "\n")
        except (OSError, ValueError) as exc:
            raise FormatError(f"failed to write line protocol: {exc}") from exc
        count += 1
    return count
