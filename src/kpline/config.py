"""Runtime settings, read from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from kpline.adapters.sources.http import DEFAULT_NOWCAST_URL
from kpline.core.adapter import DEFAULT_MEASUREMENT_NAME
from kpline.core.encoding.line_protocol import TimestampPrecision
from kpline.core.errors import ConfigError
from kpline.log_format import LOG_FORMATS

ENV_PREFIX = "KPLINE_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_precision(raw: str) -> TimestampPrecision:
    """Map a precision name (``s``, ``ms``, ``us``, ``ns``, ``none``) to its enum.

    Raises:
        ConfigError: For an unknown name.
    """
    try:
        return TimestampPrecision(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(p.value for p in TimestampPrecision)
        raise ConfigError(f"precision must be one of {choices}, got {raw!r}") from exc


def parse_log_level(raw: str) -> str:
    """Validate a log level name and return it upper-cased.

    Raises:
        ConfigError: For an unknown level.
    """
    level = raw.strip().upper()
    if level not in _LOG_LEVELS:
        choices = ", ".join(_LOG_LEVELS)
        raise ConfigError(f"log level must be one of {choices}, got {raw!r}")
    return level


def parse_log_format(raw: str) -> str:
    """Validate a log format name (``text`` or ``json``).

    Raises:
        ConfigError: For an unknown format.
    """
    log_format = raw.strip().lower()
    if log_format not in LOG_FORMATS:
        raise ConfigError(
            f"log format must be one of {', '.join(LOG_FORMATS)}, got {raw!r}"
        )
    return log_format


def parse_timeout(raw: str) -> float:
    """Parse a positive timeout in seconds.

    Raises:
        ConfigError: If raw is not a positive number.
    """
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"timeout must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"timeout must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Settings for one ingest run.

    Attributes:
        url: Location of the nowcast feed.
        cache_file: Path of the raw-text cache; empty disables caching.
        precision: Timestamp unit of emitted lines.
        measurement: Measurement name of emitted lines.
        influx_url: InfluxDB base URL; empty writes to stdout instead.
        influx_token: InfluxDB API token, or ``user:password`` for v1.
        influx_org: InfluxDB organisation (v2).
        influx_bucket: InfluxDB bucket (v2).
        influx_database: InfluxDB database (v1).
        timeout: HTTP timeout in seconds.
        log_level: Name of the logging level.
        log_format: ``text`` or ``json`` log lines on stderr.
    """

    url: str = DEFAULT_NOWCAST_URL
    cache_file: str = ""
    precision: TimestampPrecision = TimestampPrecision.MILLISECONDS
    measurement: str = DEFAULT_MEASUREMENT_NAME
    influx_url: str = ""
    influx_token: str = ""
    influx_org: str = ""
    influx_bucket: str = ""
    influx_database: str = ""
    timeout: float = 30.0
    log_level: str = "WARNING"
    log_format: str = "text"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``KPLINE_*`` environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        precision = defaults.precision
        if ENV_PREFIX + "PRECISION" in env:
            precision = parse_precision(env[ENV_PREFIX + "PRECISION"])
        timeout = defaults.timeout
        if ENV_PREFIX + "TIMEOUT" in env:
            timeout = parse_timeout(env[ENV_PREFIX + "TIMEOUT"])

        return cls(
            url=get("URL", defaults.url),
            cache_file=get("CACHE_FILE", defaults.cache_file),
            precision=precision,
            measurement=get("MEASUREMENT", defaults.measurement),
            influx_url=get("INFLUX_URL", defaults.influx_url),
            influx_token=get("INFLUX_TOKEN", defaults.influx_token),
            influx_org=get("INFLUX_ORG", defaults.influx_org),
            influx_bucket=get("INFLUX_BUCKET", defaults.influx_bucket),
            influx_database=get("INFLUX_DATABASE", defaults.influx_database),
            timeout=timeout,
            log_level=parse_log_level(get("LOG_LEVEL", defaults.log_level)),
            log_format=parse_log_format(get("LOG_FORMAT", defaults.log_format)),
        )
