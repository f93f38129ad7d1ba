"""Exception hierarchy for kpline.

Parsing errors are split by cause so callers can tell a malformed line
apart from a malformed number. Adapter errors wrap the failure of the
collaborator they talk to (network, file system, output stream).
"""


class KplineError(Exception):
    """Base exception for all kpline failures."""


class ParseError(KplineError):
    """Raised when feed text cannot be turned into entries.

    Attributes:
        lineno: 1-based line number in the parsed text, when known.
    """

    lineno: int | None = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.lineno is None:
            return message
        return f"line {self.lineno}: {message}"


class StructuralError(ParseError):
    """Raised when a feed line does not have the expected number of columns."""


class NumericParseError(ParseError):
    """Raised when a column does not hold a valid number or date component.

    The underlying ``ValueError`` is chained as ``__cause__``.

    Attributes:
        column: Name of the offending column.
        token: The raw text that failed to parse.
    """

    def __init__(self, column: str, token: str, reason: str) -> None:
        super().__init__(f"invalid {column} {token!r}: {reason}")
        self.column = column
        self.token = token


class ParseIoError(ParseError):
    """Raised when reading feed text from a stream fails."""


class FormatError(KplineError):
    """Raised when encoded output cannot be written to its destination."""


class FeedFetchError(KplineError):
    """Raised when the feed cannot be downloaded."""


class CacheError(KplineError):
    """Raised when the feed cache cannot be read or written."""


class SinkError(KplineError):
    """Raised when a sink cannot deliver measurements."""


class ConfigError(KplineError):
    """Raised for invalid runtime configuration."""
