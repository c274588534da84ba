"""
Log formatters for structured and colored output.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..error_handling import LockGraphError

# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_LEVEL_COLORS = {
    logging.DEBUG: "\033[2;36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[1;31m",
    logging.CRITICAL: "\033[1;37;41m",
}
_RESET = "\033[0m"


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Context passed with ``extra=`` (``ecosystem``, ``project``, ...) is
    merged into the top level. When the record carries a ``LockGraphError``
    its ``to_dict()`` is emitted under ``error`` so failed resolutions stay
    machine-readable.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        entry.update(self._context(record))

        if record.exc_info:
            error = record.exc_info[1]
            if isinstance(error, LockGraphError):
                entry["error"] = error.to_dict()
            else:
                entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)

    @staticmethod
    def _context(record: logging.LogRecord) -> Dict[str, Any]:
        return {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith('_')
        }


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints each line by level."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{_RESET}" if color else line
