"""Logging setup for the command-line tool.

Library modules only create loggers (``logging.getLogger(__name__)``); the
application entry point decides where records go. Output is always stderr
since stdout may carry converted content.
"""

import json
import logging
import sys

LOG_FORMATS = ('text', 'json')
TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"

_STANDARD_ATTRS = frozenset(
    logging.LogRecord('', logging.INFO, '', 0, '', (), None).__dict__
) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """JSON lines: level, logger, message, plus any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update((k, v) for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS)
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging(level: str = "WARNING", format_type: str = "text") -> None:
    """Point the root logger at stderr; unknown level names mean WARNING."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if format_type == "json" else logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
