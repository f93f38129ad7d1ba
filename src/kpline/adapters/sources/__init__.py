"""Feed source and cache adapters implementing core ports."""

from kpline.adapters.sources.file import FileFeedCache, FileFeedSource
from kpline.adapters.sources.http import DEFAULT_NOWCAST_URL, HttpFeedSource

__all__ = [
    "DEFAULT_NOWCAST_URL",
    "FileFeedCache",
    "FileFeedSource",
    "HttpFeedSource",
]
