# packsbuilder/core/logging/formatters.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from packsbuilder.core.jsonutils import safeJsonDumps
from packsbuilder.core.time import isoUtc
from .context import getLogContext

__all__ = ["JsonFormatter", "DevFormatter"]



def _contextSuffix() -> str:
    ctx = getLogContext() or {}
    parts = [str(ctx[key]) for key in ("command", "pack") if ctx.get(key)]
    return f" [{'/'.join(parts)}]" if parts else ""



class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, for the optional log file.

        {"time": "2025-01-02T03:04:05.123000Z", "level": "info", "logger": "...",
         "msg": "...", "ctx": {"pack": "italian"}, "exc": {...}}
    """
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "time": isoUtc(datetime.fromtimestamp(record.created, tz=timezone.utc)),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": getLogContext() or {},
        }

        if record.exc_info and record.exc_info[0] is not None:
            excType, excValue, _tb = record.exc_info
            entry["exc"] = {
                "type": excType.__name__,
                "message": str(excValue),
                "stack": self.formatException(record.exc_info),
            }

        return safeJsonDumps(entry)



class DevFormatter(logging.Formatter):
    """Console lines: `LEVEL: [logger] message [command/pack]`."""
    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        if record.stack_info:
            text = f"{text}\n{self.formatStack(record.stack_info)}"
        return f"{record.levelname}: [{record.name}] {text}{_contextSuffix()}"
