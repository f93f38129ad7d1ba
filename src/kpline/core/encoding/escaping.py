"""Character escaping for the InfluxDB line protocol.

Which characters need a backslash depends on where the text ends up in
the line (measurement name, tag, field key or string field value). A
single ``escape`` function takes one flag per optional character; the
``EscapeProfile`` constants name the combinations the encoder uses.
"""

from typing import NamedTuple

# Control characters are always replaced by a backslash-letter pair
_ALWAYS_ESCAPED = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape(
    text: str,
    escape_equals: bool = False,
    escape_commas: bool = False,
    escape_spaces: bool = False,
    escape_double_quotes: bool = False,
    wrap_as_quoted_string: bool = False,
) -> str:
    """Escape text for use inside a line-protocol line.

    Newline, carriage return and tab are always escaped. Equals signs,
    commas, spaces and double quotes are escaped only when their flag is
    set. Backslashes are passed through unchanged.

    Args:
        text: The text to escape.
        escape_equals: Prefix ``=`` with a backslash.
        escape_commas: Prefix ``,`` with a backslash.
        escape_spaces: Prefix spaces with a backslash.
        escape_double_quotes: Prefix ``"`` with a backslash.
        wrap_as_quoted_string: Surround the result with double quotes.

    Returns:
        The escaped text.
    """
    optional = {
        "=": escape_equals,
        ",": escape_commas,
        " ": escape_spaces,
        '"': escape_double_quotes,
    }
    parts = []
    for char in text:
        if char in _ALWAYS_ESCAPED:
            parts.append(_ALWAYS_ESCAPED[char])
        elif optional.get(char, False):
            parts.append("\\" + char)
        else:
            parts.append(char)

    escaped = "".join(parts)
    if wrap_as_quoted_string:
        return f'"{escaped}"'
    return escaped


class EscapeProfile(NamedTuple):
    """A named set of escaping flags for one position in a line."""

    escape_equals: bool
    escape_commas: bool
    escape_spaces: bool
    escape_double_quotes: bool
    wrap_as_quoted_string: bool

    def apply(self, text: str) -> str:
        """Escape text with this profile's flags."""
        return escape(
            text,
            escape_equals=self.escape_equals,
            escape_commas=self.escape_commas,
            escape_spaces=self.escape_spaces,
            escape_double_quotes=self.escape_double_quotes,
            wrap_as_quoted_string=self.wrap_as_quoted_string,
        )


MEASUREMENT_NAME = EscapeProfile(False, True, True, True, False)
TAG = EscapeProfile(True, True, True, True, False)
FIELD_KEY = EscapeProfile(True, True, True, True, False)
STRING_VALUE = EscapeProfile(False, False, False, True, True)
