"""InfluxDB HTTP write sink backed by httpx.

Supports both write APIs:

- v2 (``/api/v2/write``), selected by giving a bucket; authenticates with
  an API token and an organisation.
- v1 (``/write``), selected by giving a database name.
"""

import logging

import httpx

from kpline.core.encoding.line_protocol import Measurement, TimestampPrecision
from kpline.core.errors import ConfigError, SinkError

logger = logging.getLogger(__name__)

# v1 spells nanoseconds and microseconds with a single letter
_V1_PRECISION = {
    TimestampPrecision.SECONDS: "s",
    TimestampPrecision.MILLISECONDS: "ms",
    TimestampPrecision.MICROSECONDS: "u",
    TimestampPrecision.NANOSECONDS: "n",
}


class InfluxHttpSink:
    """Implementation of MeasurementSinkPort posting to an InfluxDB server.

    Lines are buffered by ``write`` and sent as one request body by
    ``flush``. A failed request leaves the buffer intact.

    Args:
        url: Base URL of the server, e.g. ``http://localhost:8086``.
        precision: Timestamp unit of the encoded lines.
        token: API token (v2) or ``user:password`` (v1), optional.
        org: Organisation name for the v2 API.
        bucket: Target bucket; selects the v2 API.
        database: Target database; selects the v1 API.
        timeout: Request timeout in seconds.
        client: Optional preconfigured ``httpx.Client``.

    Raises:
        ConfigError: If neither bucket nor database is given.
    """

    def __init__(
        self,
        url: str,
        precision: TimestampPrecision = TimestampPrecision.MILLISECONDS,
        token: str | None = None,
        org: str | None = None,
        bucket: str | None = None,
        database: str | None = None,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not bucket and not database:
            raise ConfigError("an InfluxDB bucket or database is required")
        self.url = url.rstrip("/")
        self.precision = precision
        self.token = token
        self.org = org
        self.bucket = bucket
        self.database = database
        self.timeout = timeout
        self._client = client
        self._buffer: list[str] = []

    @property
    def pending(self) -> int:
        """Number of lines waiting to be sent."""
        return len(self._buffer)

    def _endpoint(self) -> tuple[str, dict[str, str], dict[str, str]]:
        """Return the write URL, query parameters and headers."""
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        params: dict[str, str] = {}
        if self.bucket:
            params["bucket"] = self.bucket
            if self.org:
                params["org"] = self.org
            if self.precision is not TimestampPrecision.NONE:
                params["precision"] = self.precision.value
            if self.token:
                headers["Authorization"] = f"Token {self.token}"
            return f"{self.url}/api/v2/write", params, headers

        params["db"] = self.database or ""
        if self.precision is not TimestampPrecision.NONE:
            params["precision"] = _V1_PRECISION[self.precision]
        if self.token:
            user, _, password = self.token.partition(":")
            params["u"] = user
            params["p"] = password
        return f"{self.url}/write", params, headers

    def write(self, measurement: Measurement) -> None:
        """Encode the measurement and buffer it until the next flush."""
        self._buffer.append(measurement.to_line_protocol(self.precision))

    def flush(self) -> None:
        """Send all buffered lines in one request.

        Raises:
            SinkError: On transport errors or a non-success status.
        """
        if not self._buffer:
            return
        url, params, headers = self._endpoint()
        body = ("\n".join(self._buffer) + "\n").encode("utf-8")
        try:
            if self._client is not None:
                response = self._client.post(
                    url,
                    params=params,
                    headers=headers,
                    content=body,
                    timeout=self.timeout,
                )
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(
                        url, params=params, headers=headers, content=body
                    )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SinkError(
                f"InfluxDB write to '{url}' failed with status "
                f"{exc.response.status_code}: {exc.response.text.strip()}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SinkError(f"InfluxDB write to '{url}' failed: {exc}") from exc

        logger.info("Wrote %d lines to %s", len(self._buffer), url)
        self._buffer.clear()
