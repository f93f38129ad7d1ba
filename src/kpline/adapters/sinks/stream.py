"""Text stream sink, used for stdout output."""

import sys
from typing import TextIO

from kpline.core.encoding.line_protocol import (
    Measurement,
    TimestampPrecision,
    write_line_protocol,
)
from kpline.core.errors import FormatError


class StreamSink:
    """Implementation of MeasurementSinkPort writing one line per measurement.

    Args:
        stream: Destination text stream. Defaults to the current
            ``sys.stdout`` at write time.
        precision: Timestamp unit of the written lines.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        precision: TimestampPrecision = TimestampPrecision.MILLISECONDS,
    ) -> None:
        self._stream = stream
        self.precision = precision
        self.written = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, measurement: Measurement) -> None:
        """Write the measurement as a newline-terminated line.

        Raises:
            FormatError: If the stream rejects the write.
        """
        self.written += write_line_protocol([measurement], self.stream, self.precision)

    def flush(self) -> None:
        """Flush the underlying stream.

        Raises:
            FormatError: If the stream cannot be flushed.
        """
        try:
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise FormatError(f"failed to flush output: {exc}") from exc
