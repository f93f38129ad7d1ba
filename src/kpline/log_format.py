"""Log formatters for the command-line runner.

``JsonLogFormatter`` renders each record as one JSON object per line so
cron or Telegraf logs can be shipped as NDJSON alongside the data.
"""

import json
import logging

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

LOG_FORMATS = ("text", "json")


class JsonLogFormatter(logging.Formatter):
    """Formatter producing one JSON object per record.

    The object holds ``timestamp``, ``level``, ``logger``, ``message`` and
    ``attributes``. Scalar values passed with ``extra=`` and the details of
    a logged exception end up in ``attributes``.

    Example:
        ```python
        handler = logging.StreamHandler()
        handler.setFormatter(JsonLogFormatter())
        logging.getLogger("kpline").addHandler(handler)
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        attributes: dict[str, str | int | float | bool] = {
            "funcName": record.funcName or "",
            "lineno": record.lineno,
        }
        attributes.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and isinstance(value, (str, int, float, bool))
        )
        if record.exc_info and record.exc_info[0] is not None:
            attributes["exc_type"] = record.exc_info[0].__name__
            attributes["exc_message"] = str(record.exc_info[1])
            attributes["exc_traceback"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                "timestamp": record.created,
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
                "attributes": attributes,
            }
        )


def build_log_handler(log_format: str = "text") -> logging.Handler:
    """Return a stderr handler using the named format.

    Raises:
        ValueError: For a format other than ``text`` or ``json``.
    """
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonLogFormatter())
    elif log_format == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        raise ValueError(f"unknown log format: {log_format!r}")
    return handler
