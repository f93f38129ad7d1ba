"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest

# Feed as published at one point in time: comment, two definitive rows,
# provisional rows, and two placeholder rows whose values are not known yet.
FEED_EARLIER = """
# Kp and ap nowcast
# YYY MM DD hh.h hh._m days days_m Kp ap D
2022 07 31 18.0 19.50 33084.75000 33084.81250  2.000    7 1
2022 07 31 21.0 22.50 33084.87500 33084.93750  3.000   15 1
2022 08 01 00.0 01.50 33085.00000 33085.06250  2.667   12 0
2022 08 01 03.0 04.50 33085.12500 33085.18750  2.333    9 0
2022 08 18 03.0 04.50 33102.12500 33102.18750  2.333    9 0
2022 08 18 06.0 07.50 33102.25000 33102.31250  3.000   15 0
2022 08 18 09.0 10.50 33102.37500 33102.43750 -1.000   -1 0
2022 08 18 12.0 13.50 33102.50000 33102.56250 -1.000   -1 0
"""

# A later copy of the same feed: the placeholders now hold values and a
# revised row appears.
FEED_LATER = """
2022 07 31 18.0 19.50 33084.75000 33084.81250  2.000    7 1
2022 07 31 21.0 22.50 33084.87500 33084.93750  3.000   15 1
2022 08 01 00.0 01.50 33085.00000 33085.06250  2.667   12 0
2022 08 01 03.0 04.50 33085.12500 33085.18750  2.333    9 0
2022 08 18 00.0 01.50 33102.00000 33102.06250  2.667   12 0
2022 08 18 03.0 04.50 33102.12500 33102.18750  2.333    9 0
2022 08 18 06.0 07.50 33102.25000 33102.31250  3.333   18 0
2022 08 18 09.0 10.50 33102.37500 33102.43750  2.667   12 0
2022 08 18 12.0 13.50 33102.50000 33102.56250  5.000   48 0
2022 08 27 12.0 13.50 33111.50000 33111.56250 -1.000   -1 0
"""


@pytest.fixture
def feed_earlier() -> str:
    """Feed text of the earlier download."""
    return FEED_EARLIER


@pytest.fixture
def feed_later() -> str:
    """Feed text of the later download."""
    return FEED_LATER


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    """Provide a temporary path for the feed cache file."""
    return tmp_path / "nowcast.txt"
