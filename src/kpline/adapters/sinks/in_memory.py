"""In-memory measurement sink."""

from kpline.core.encoding.line_protocol import Measurement, TimestampPrecision


class InMemorySink:
    """In-memory implementation of MeasurementSinkPort.

    Keeps every measurement together with its encoded line. Suitable for
    testing and for embedding kpline in another program.
    """

    def __init__(
        self, precision: TimestampPrecision = TimestampPrecision.MILLISECONDS
    ) -> None:
        self.precision = precision
        self._measurements: list[Measurement] = []
        self._lines: list[str] = []
        self.flush_count = 0

    def write(self, measurement: Measurement) -> None:
        """Encode and keep a measurement."""
        self._lines.append(measurement.to_line_protocol(self.precision))
        self._measurements.append(measurement)

    def flush(self) -> None:
        """Record that a flush happened; nothing is buffered."""
        self.flush_count += 1

    @property
    def measurements(self) -> list[Measurement]:
        return list(self._measurements)

    @property
    def lines(self) -> list[str]:
        """Encoded lines in write order, without newlines."""
        return list(self._lines)
