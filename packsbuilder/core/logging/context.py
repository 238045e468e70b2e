# packsbuilder/core/logging/context.py
from __future__ import annotations
import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

__all__ = ["setLogContext", "clearLogContext", "getLogContext", "logContext"]

# Keys currently used: "pack" (pack directory name) and "command" (CLI command).
_packLogContext: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar(
    "packsbuilder.logctx", default=None
)

def setLogContext(**values: object) -> None:
    """Adds values to the log context. None values are skipped."""
    merged = dict(_packLogContext.get() or {})
    merged.update({key: value for key, value in values.items() if value is not None})
    _packLogContext.set(merged)

def clearLogContext() -> None:
    _packLogContext.set(None)

def getLogContext() -> dict[str, object] | None:
    return _packLogContext.get()

@contextmanager
def logContext(**values: object) -> Iterator[None]:
    """
    Scopes log context to a block; whatever was set before is restored on exit.

        with logContext(pack="italian"):
            logger.info("Processing")  # INFO: [packsbuilder.packs.pipeline] Processing [italian]
    """
    token = _packLogContext.set(dict(_packLogContext.get() or {}))
    setLogContext(**values)
    try:
        yield
    finally:
        _packLogContext.reset(token)
