"""Conversion of feed entries into line-protocol measurements."""

from kpline.core.encoding.line_protocol import Measurement
from kpline.core.models import Entry
from kpline.core.values import Float, Signed

DEFAULT_MEASUREMENT_NAME = "iono_activity"


def entry_to_measurement(
    entry: Entry, name: str = DEFAULT_MEASUREMENT_NAME
) -> Measurement:
    """Build the measurement for one entry.

    Kp becomes a float field and ap a signed integer field; the
    definitive flag becomes the ``def`` tag.

    Args:
        entry: The feed entry.
        name: Measurement name (default: "iono_activity").

    Returns:
        Measurement timestamped with the entry's date.
    """
    return (
        Measurement(name)
        .add_value("kp", Float(entry.kp))
        .add_value("ap", Signed(entry.ap))
        .add_tag("def", str(entry.definitive))
        .set_time(entry.date)
    )
