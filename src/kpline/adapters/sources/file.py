"""File-system adapters: a local feed copy and the raw-text cache."""

import logging
from pathlib import Path

from kpline.core.errors import CacheError, FeedFetchError

logger = logging.getLogger(__name__)


class FileFeedSource:
    """Implementation of FeedSourcePort that reads a local copy of the feed."""

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def fetch(self) -> str:
        """Read the feed file.

        Raises:
            FeedFetchError: If the file cannot be read.
        """
        try:
            return self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise FeedFetchError(f"error reading '{self.path}': {exc}") from exc


class FileFeedCache:
    """Implementation of FeedCachePort storing the raw feed text in a file.

    The text is written back verbatim, so the next run parses exactly what
    this run downloaded.
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def load(self) -> str | None:
        """Return the cached text, or None when the cache file does not exist.

        Raises:
            CacheError: If the file exists but cannot be read.
        """
        if not self.path.exists():
            logger.debug("No cache at %s", self.path)
            return None
        try:
            return self.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheError(f"error reading file '{self.path}': {exc}") from exc

    def store(self, text: str) -> None:
        """Overwrite the cache file with text.

        Raises:
            CacheError: If the file cannot be written.
        """
        try:
            # newline="" keeps the downloaded line endings untouched
            with self.path.open("w", encoding=self.encoding, newline="") as handle:
                handle.write(text)
        except OSError as exc:
            raise CacheError(f"error writing file '{self.path}': {exc}") from exc
        logger.debug("Cached %d characters at %s", len(text), self.path)
