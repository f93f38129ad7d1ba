"""Tests for the command-line entry point."""

import os
from pathlib import Path

import pytest

from kpline import cli
from kpline.adapters.sinks import InfluxHttpSink, StreamSink
from kpline.core.encoding.line_protocol import TimestampPrecision
from kpline.core.errors import FeedFetchError
from tests.helpers import StaticFeedSource


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove KPLINE_* variables inherited from the shell."""
    for name in list(os.environ):
        if name.startswith("KPLINE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def serve(monkeypatch: pytest.MonkeyPatch):
    """Replace the HTTP source with a static feed; returns the setter."""
    requested: list[str] = []

    def set_feed(text: str) -> list[str]:
        def factory(url: str, timeout: float = 30.0) -> StaticFeedSource:
            requested.append(url)
            return StaticFeedSource(text)

        monkeypatch.setattr(cli, "HttpFeedSource", factory)
        return requested

    return set_feed


class TestBuildParser:
    """Tests for argument parsing."""

    @pytest.mark.cli
    def test_defaults(self) -> None:
        """Without arguments the documented defaults apply."""
        args = cli.build_parser().parse_args([])

        assert args.url.endswith("Kp_ap_nowcast.txt")
        assert args.cache_file == ""
        assert args.diagnostic_output is False
        assert args.precision is TimestampPrecision.MILLISECONDS
        assert args.measurement == "iono_activity"
        assert args.influx_url == ""

    @pytest.mark.cli
    def test_short_options(self) -> None:
        """Short flags map to their long counterparts."""
        args = cli.build_parser().parse_args(
            ["-u", "http://x/kp.txt", "-c", "cache.txt", "-d", "-p", "s", "-m", "kp"]
        )

        assert args.url == "http://x/kp.txt"
        assert args.cache_file == "cache.txt"
        assert args.diagnostic_output is True
        assert args.precision is TimestampPrecision.SECONDS
        assert args.measurement == "kp"

    @pytest.mark.cli
    def test_invalid_precision_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        """An unknown precision is a usage error."""
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(["--precision", "hours"])

        assert excinfo.value.code == 2
        assert "precision must be one of" in capsys.readouterr().err


class TestBuildSink:
    """Tests for sink selection."""

    @pytest.mark.cli
    def test_stdout_by_default(self) -> None:
        """Without an InfluxDB URL lines go to stdout."""
        args = cli.build_parser().parse_args([])

        assert isinstance(cli.build_sink(args), StreamSink)

    @pytest.mark.cli
    def test_influx_when_url_given(self) -> None:
        """An InfluxDB URL selects the HTTP sink."""
        args = cli.build_parser().parse_args(
            ["--influx-url", "http://influx:8086", "--influx-bucket", "kp", "-p", "s"]
        )

        sink = cli.build_sink(args)

        assert isinstance(sink, InfluxHttpSink)
        assert sink.bucket == "kp"
        assert sink.precision is TimestampPrecision.SECONDS


class TestMain:
    """Tests for main()."""

    @pytest.mark.cli
    def test_prints_all_entries_without_cache(
        self, serve, feed_earlier: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """The first run prints every available entry."""
        requested = serve(feed_earlier)

        code = cli.main(["-u", "http://mirror/kp.txt"])

        lines = capsys.readouterr().out.splitlines()
        assert code == 0
        assert requested == ["http://mirror/kp.txt"]
        assert len(lines) == 6
        assert lines[0] == "iono_activity,def=1 kp=2,ap=7i 1659295800000"

    @pytest.mark.cli
    def test_cache_limits_second_run_to_new_entries(
        self,
        serve,
        feed_earlier: str,
        feed_later: str,
        cache_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A second run prints only what appeared since the first."""
        serve(feed_earlier)
        assert cli.main(["-c", str(cache_path)]) == 0
        capsys.readouterr()

        serve(feed_later)
        assert cli.main(["-c", str(cache_path), "-p", "s"]) == 0

        assert capsys.readouterr().out.splitlines() == [
            "iono_activity,def=0 kp=2.667,ap=12i 1660818600",
            "iono_activity,def=0 kp=5,ap=48i 1660829400",
        ]
        assert cache_path.read_text(encoding="utf-8") == feed_later

    @pytest.mark.cli
    def test_diagnostic_output(
        self, serve, feed_earlier: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """-d prints snapshot summaries and entries instead of line protocol."""
        serve(feed_earlier)

        assert cli.main(["-d"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Downloaded Kp file: 6 entries, last entry: ")
        assert lines[1] == "Cached Kp file: 0 entries, last entry: none"
        assert lines[2] == "Time = 2022-07-31 19:30:00, Kp = 2, ap = 7, d = 1"
        assert len(lines) == 8

    @pytest.mark.cli
    def test_fetch_failure_returns_one(
        self,
        monkeypatch: pytest.MonkeyPatch,
        cache_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Errors are reported on stderr with a non-zero exit and no cache write."""

        class FailingSource:
            def __init__(self, url: str, timeout: float = 30.0) -> None:
                self.url = url

            def fetch(self) -> str:
                raise FeedFetchError(f"error while downloading '{self.url}': boom")

        monkeypatch.setattr(cli, "HttpFeedSource", FailingSource)

        code = cli.main(["-c", str(cache_path)])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        assert captured.err.startswith("kpline: error while downloading")
        assert not cache_path.exists()

    @pytest.mark.cli
    def test_malformed_feed_returns_one(
        self, serve, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A parse failure aborts the run."""
        serve("# header\nFoobar\n")

        assert cli.main([]) == 1
        assert "line 2: expected 10 columns" in capsys.readouterr().err

    @pytest.mark.cli
    def test_out_of_range_ap_returns_one(
        self, serve, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """An ap too large for an integer field is reported, not raised."""
        serve(f"2022 07 31 18.0 19.50 0 0 2.000 {10**40} 1\n")

        assert cli.main([]) == 1
        assert "line 1: invalid ap" in capsys.readouterr().err

    @pytest.mark.cli
    def test_invalid_environment_returns_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Bad KPLINE_* values are reported before anything runs."""
        monkeypatch.setenv("KPLINE_PRECISION", "weekly")

        assert cli.main([]) == 1
        assert capsys.readouterr().err.startswith("kpline: precision must be one of")

    @pytest.mark.cli
    def test_environment_supplies_defaults(
        self,
        serve,
        monkeypatch: pytest.MonkeyPatch,
        feed_earlier: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """KPLINE_* values become option defaults."""
        serve(feed_earlier)
        monkeypatch.setenv("KPLINE_MEASUREMENT", "kp_index")
        monkeypatch.setenv("KPLINE_PRECISION", "none")

        assert cli.main([]) == 0

        first = capsys.readouterr().out.splitlines()[0]
        assert first == "kp_index,def=1 kp=2,ap=7i"
