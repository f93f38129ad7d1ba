"""Command-line entry point.

Downloads the Kp/ap nowcast, prints the entries that are new since the
last run as line protocol (or sends them to InfluxDB), and keeps the
downloaded text as the cache for the next run. Meant to be run from cron
or a Telegraf ``exec`` input.
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from kpline.adapters.sinks.influx import InfluxHttpSink
from kpline.adapters.sinks.stream import StreamSink
from kpline.adapters.sources.file import FileFeedCache
from kpline.adapters.sources.http import HttpFeedSource
from kpline.config import (
    Settings,
    parse_log_format,
    parse_log_level,
    parse_precision,
    parse_timeout,
)
from kpline.core.errors import ConfigError, KplineError
from kpline.core.ports import MeasurementSinkPort
from kpline.ingest import run_ingest
from kpline.log_format import build_log_handler

logger = logging.getLogger(__name__)


def _argument_type(parse):
    """Adapt a ConfigError-raising parser for argparse ``type=``."""

    def convert(raw: str):
        try:
            return parse(raw)
        except ConfigError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    return convert


def build_parser(settings: Settings | None = None) -> argparse.ArgumentParser:
    """Build the argument parser, with defaults taken from settings."""
    defaults = settings or Settings()
    parser = argparse.ArgumentParser(
        prog="kpline",
        description="Emit new GFZ Kp/ap nowcast entries as InfluxDB line protocol.",
    )
    parser.add_argument("-u", "--url", default=defaults.url, help="feed URL")
    parser.add_argument(
        "-c",
        "--cache-file",
        default=defaults.cache_file,
        help="file holding the feed text of the previous run",
    )
    parser.add_argument(
        "-d",
        "--diagnostic-output",
        action="store_true",
        help="print parsed feed summaries instead of line protocol",
    )
    parser.add_argument(
        "-p",
        "--precision",
        type=_argument_type(parse_precision),
        default=defaults.precision,
        help="timestamp unit: s, ms, us, ns or none (default: ms)",
    )
    parser.add_argument(
        "-m",
        "--measurement",
        default=defaults.measurement,
        help="measurement name (default: %(default)s)",
    )
    parser.add_argument(
        "--influx-url",
        default=defaults.influx_url,
        help="InfluxDB base URL; without it lines go to stdout",
    )
    parser.add_argument("--influx-token", default=defaults.influx_token)
    parser.add_argument("--influx-org", default=defaults.influx_org)
    parser.add_argument("--influx-bucket", default=defaults.influx_bucket)
    parser.add_argument("--influx-database", default=defaults.influx_database)
    parser.add_argument(
        "--timeout",
        type=_argument_type(parse_timeout),
        default=defaults.timeout,
        help="HTTP timeout in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=_argument_type(parse_log_level),
        default=defaults.log_level,
        help="logging level on stderr (default: %(default)s)",
    )
    parser.add_argument(
        "--log-format",
        type=_argument_type(parse_log_format),
        default=defaults.log_format,
        help="log line format on stderr: text or json (default: %(default)s)",
    )
    return parser


def build_sink(args: argparse.Namespace) -> MeasurementSinkPort:
    """Pick the InfluxDB sink when a server URL is given, else stdout."""
    if args.influx_url:
        return InfluxHttpSink(
            url=args.influx_url,
            precision=args.precision,
            token=args.influx_token or None,
            org=args.influx_org or None,
            bucket=args.influx_bucket or None,
            database=args.influx_database or None,
            timeout=args.timeout,
        )
    return StreamSink(sys.stdout, precision=args.precision)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one ingest and return the process exit code."""
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        print(f"kpline: {exc}", file=sys.stderr)
        return 1

    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=args.log_level, handlers=[build_log_handler(args.log_format)]
    )

    try:
        result = run_ingest(
            source=HttpFeedSource(args.url, timeout=args.timeout),
            sink=build_sink(args),
            cache=FileFeedCache(args.cache_file) if args.cache_file else None,
            measurement_name=args.measurement,
            diagnostic=args.diagnostic_output,
            out=sys.stdout,
        )
    except KplineError as exc:
        logger.debug("Ingest failed", exc_info=True)
        print(f"kpline: {exc}", file=sys.stderr)
        return 1

    logger.info(
        "Done: %d fetched, %d cached, %d new",
        result.current_count,
        result.cached_count,
        result.new_count,
    )
    return 0
