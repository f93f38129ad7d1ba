"""Test doubles for the feed source and cache ports."""


class StaticFeedSource:
    """Feed source returning fixed text, counting fetches."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.fetches = 0

    def fetch(self) -> str:
        self.fetches += 1
        return self.text


class InMemoryFeedCache:
    """Feed cache held in memory."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.stores = 0

    def load(self) -> str | None:
        return self.text

    def store(self, text: str) -> None:
        self.text = text
        self.stores += 1
