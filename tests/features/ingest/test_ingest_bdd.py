"""BDD tests for the incremental ingest run."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from kpline.adapters.sinks import InMemorySink
from kpline.config import parse_precision
from kpline.core.errors import KplineError, StructuralError
from kpline.ingest import IngestResult, run_ingest
from tests.helpers import InMemoryFeedCache, StaticFeedSource

scenarios("ingest.feature")

pytestmark = pytest.mark.storage


@dataclass
class IngestScenarioContext:
    """State shared between the steps of one scenario."""

    cache: InMemoryFeedCache = field(default_factory=InMemoryFeedCache)
    sink: InMemorySink = field(default_factory=InMemorySink)
    feed: str = ""
    result: IngestResult | None = None
    error: KplineError | None = None


@pytest.fixture
def ctx() -> IngestScenarioContext:
    """Fresh scenario context for each test."""
    return IngestScenarioContext()


# === Given ===
@given("an empty feed cache")
def step_empty_cache(ctx: IngestScenarioContext) -> None:
    ctx.cache = InMemoryFeedCache()


@given(parsers.parse('an in-memory sink with precision "{precision}"'))
def step_sink(ctx: IngestScenarioContext, precision: str) -> None:
    ctx.sink = InMemorySink(precision=parse_precision(precision))


@given("the nowcast feed contains:")
def step_feed(ctx: IngestScenarioContext, docstring: str) -> None:
    ctx.feed = docstring + "\n"


@given("the ingest has run once")
def step_previous_run(ctx: IngestScenarioContext) -> None:
    run_ingest(StaticFeedSource(ctx.feed), InMemorySink(), ctx.cache)


# === When ===
@when("the ingest runs")
def step_run(ctx: IngestScenarioContext) -> None:
    try:
        ctx.result = run_ingest(StaticFeedSource(ctx.feed), ctx.sink, ctx.cache)
    except KplineError as exc:
        ctx.error = exc


# === Then ===
@then(parsers.parse("{count:d} lines are written"))
def step_line_count(ctx: IngestScenarioContext, count: int) -> None:
    assert len(ctx.sink.lines) == count


@then(parsers.parse('line {index:d} is "{expected}"'))
def step_line(ctx: IngestScenarioContext, index: int, expected: str) -> None:
    assert ctx.sink.lines[index - 1] == expected


@then("the cache holds the downloaded feed")
def step_cache_updated(ctx: IngestScenarioContext) -> None:
    assert ctx.cache.text == ctx.feed


@then("the cache is still empty")
def step_cache_empty(ctx: IngestScenarioContext) -> None:
    assert ctx.cache.text is None


@then(parsers.parse("the run fails with a structural error on line {lineno:d}"))
def step_structural_error(ctx: IngestScenarioContext, lineno: int) -> None:
    assert isinstance(ctx.error, StructuralError)
    assert ctx.error.lineno == lineno
