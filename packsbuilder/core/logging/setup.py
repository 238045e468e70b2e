# packsbuilder/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers
from pathlib import Path

from .formatters import DevFormatter, JsonFormatter

__all__ = [
    "configureLogging",
]



def configureLogging(level: int | str = logging.INFO, logFile: str | Path | None = None) -> None:
    """
    Initiate the global logging configuration.

      - Console: human-readable lines via DevFormatter
      - Optional JSON file log with rotation, one record per line
    
    Calling it again replaces the handlers installed previously.
    """
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    consoleHandler = logging.StreamHandler()
    consoleHandler.setLevel(level)
    consoleHandler.setFormatter(DevFormatter())
    root.addHandler(consoleHandler)

    if logFile:
        logPath = Path(logFile)
        logPath.parent.mkdir(parents=True, exist_ok=True)
        fileHandler = logging.handlers.RotatingFileHandler(
            logPath,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        fileHandler.setLevel(level)
        fileHandler.setFormatter(JsonFormatter())
        root.addHandler(fileHandler)
