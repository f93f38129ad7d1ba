"""Typed field values for line-protocol measurements.

The line protocol distinguishes floats, signed and unsigned integers,
strings and booleans by their spelling. Each variant is a small frozen
dataclass; ``render`` turns any of them into its wire text.
"""

import math
import struct
from dataclasses import dataclass
from decimal import Decimal

from kpline.core.encoding.escaping import STRING_VALUE

_SIGNED_MIN = -(2**127)
_SIGNED_MAX = 2**127 - 1
_UNSIGNED_MAX = 2**128 - 1


def _to_float32(value: float) -> float:
    """Round a float to the nearest 32-bit float."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as exc:
        raise ValueError(f"{value!r} does not fit in a 32-bit float") from exc


def _require_real(variant: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{variant} expects a float, got {type(value).__name__}")
    try:
        value = float(value)
    except OverflowError as exc:
        raise ValueError(f"{value!r} is too large for a float") from exc
    if not math.isfinite(value):
        raise ValueError(f"line protocol cannot represent {value!r}")
    return value


def _positional(text: str) -> str:
    """Rewrite a shortest-repr float string in plain positional notation.

    Exponents are expanded and a trailing ``.0`` is dropped, so ``2.0``
    becomes ``2`` and ``1e+16`` becomes ``10000000000000000``.
    """
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _shortest_float32(value: float) -> str:
    # Fewest significant digits that still round-trip through 32 bits
    for digits in range(1, 10):
        text = f"{value:.{digits}g}"
        if _to_float32(float(text)) == value:
            return text
    return repr(value)


@dataclass(frozen=True)
class Float:
    """A 32-bit float field value."""

    value: float

    def __post_init__(self) -> None:
        value = _require_real("Float", self.value)
        object.__setattr__(self, "value", _to_float32(value))

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Double:
    """A 64-bit float field value."""

    value: float

    def __post_init__(self) -> None:
        value = _require_real("Double", self.value)
        object.__setattr__(self, "value", value)

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Signed:
    """A 128-bit signed integer field value, rendered with an ``i`` suffix."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Signed expects an int, got {type(self.value).__name__}")
        if not _SIGNED_MIN <= self.value <= _SIGNED_MAX:
            raise ValueError(f"{self.value} does not fit in a signed 128-bit integer")

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Unsigned:
    """A 128-bit unsigned integer field value, rendered with a ``u`` suffix."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(
                f"Unsigned expects an int, got {type(self.value).__name__}"
            )
        if not 0 <= self.value <= _UNSIGNED_MAX:
            raise ValueError(
                f"{self.value} does not fit in an unsigned 128-bit integer"
            )

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class String:
    """A string field value, rendered double quoted."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError(f"String expects a str, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Boolean:
    """A boolean field value, rendered as ``true`` or ``false``."""

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Boolean expects a bool, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return render(self)


TRUE = Boolean(True)
FALSE = Boolean(False)

Value = Float | Double | Signed | Unsigned | String | Boolean


def render(value: Value) -> str:
    """Render a field value in line-protocol syntax.

    Args:
        value: Any of the value variants.

    Returns:
        The wire text for the value. Floats use the shortest decimal that
        round-trips at their width and carry no type suffix; integers end
        in ``i`` or ``u``; strings are quoted and escaped.

    Raises:
        TypeError: If value is not one of the value variants.
    """
    if isinstance(value, Float):
        return _positional(_shortest_float32(value.value))
    if isinstance(value, Double):
        return _positional(repr(value.value))
    if isinstance(value, Signed):
        return f"{value.value}i"
    if isinstance(value, Unsigned):
        return f"{value.value}u"
    if isinstance(value, String):
        return STRING_VALUE.apply(value.value)
    if isinstance(value, Boolean):
        return "true" if value.value else "false"
    raise TypeError(f"not a field value: {value!r}")


def to_value(obj: Value | bool | int | float | str) -> Value:
    """Convert a native Python object into the matching value variant.

    ``bool`` becomes Boolean, ``int`` Signed, ``float`` Double and ``str``
    String. Value instances are returned unchanged.

    Raises:
        TypeError: If obj has no matching variant.
    """
    if isinstance(obj, (Float, Double, Signed, Unsigned, String, Boolean)):
        return obj
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return Signed(obj)
    if isinstance(obj, float):
        return Double(obj)
    if isinstance(obj, str):
        return String(obj)
    raise TypeError(f"cannot convert {type(obj).__name__} to a field value")
