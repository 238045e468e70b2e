# packsbuilder/core/jsonutils.py
from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

__all__ = ["safeJsonDumps", "tryJSONify", "readJsonObject", "writeJsonAtomic"]



# ------------------------------------------------
#                JSON serialization
# ------------------------------------------------

def safeJsonDumps(obj: object | BaseModel) -> str:
    """
    Serializes an object or pydantic model to a compact JSON string.
    Uses deterministic separators (",", ":") and disallows NaN/infinity.
    UTF-8 characters are kept as-is.
    If direct JSON encoding fails, falls back to tryJSONify (circular/depth-safe) and retries.
    """
    payload: Any
    if isinstance(obj, BaseModel):
        payload = obj.model_dump(mode="json")
    else:
        payload = obj

    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except Exception:
        safePayload = tryJSONify(payload, _maxDepth=None)
        return json.dumps(safePayload, ensure_ascii=False, allow_nan=False, separators=(",", ":"))



def tryJSONify(obj: Any, *, _seen: set[int] | None = None, _depth: int = 0, _maxDepth: int | None = 10) -> Any:
    """
    Attempts to make any object JSON-serializable.

    Rules:
      • Basic scalars (None, bool, int, float, str) are preserved.
      • Exceptions → {"type": ..., "message": ...}.
      • date/datetime → ISO8601 string.
      • Path → string path.
      • pydantic models and dataclasses → dict.
      • sets/tuples/iterables → list.
      • Mappings → dict with str keys.
      • fallback → repr(obj)
    """
    if _seen is None:
        _seen = set()

    oid = id(obj)
    if oid in _seen:
        return f"<circular_ref {type(obj).__name__}>"
    if isinstance(_maxDepth, int) and _depth > _maxDepth:
        return f"<max_depth_exceeded {type(obj).__name__}>"

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    _seen.add(oid)
    nested = {"_seen": _seen, "_depth": _depth + 1, "_maxDepth": _maxDepth}

    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}

    if isinstance(obj, (date, datetime)):
        return obj.isoformat()

    if isinstance(obj, Enum):
        return tryJSONify(obj.value, **nested)

    if isinstance(obj, BaseModel):
        return tryJSONify(obj.model_dump(mode="json"), **nested)

    if is_dataclass(obj) and not isinstance(obj, type):
        return tryJSONify(asdict(obj), **nested)

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, Mapping):
        return {str(key): tryJSONify(value, **nested) for key, value in obj.items()}

    if isinstance(obj, (set, frozenset, tuple)) or isinstance(obj, Iterable):
        return [tryJSONify(value, **nested) for value in obj]

    # Last-ditch representation (avoid raising during logging)
    return repr(obj)



# ------------------------------------------------
#                 Document files
# ------------------------------------------------

def readJsonObject(path: Path) -> dict[str, Any] | None:
    """
    Reads a JSON document whose top level must be an object.

    Returns None when the file is missing, unreadable, malformed or not an object.
    Failures are logged, never raised.
    """
    if not path.is_file():
        return None
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as err:
        logger.warning("Ignoring unreadable JSON document '%s': %s", path, err)
        return None
    if not isinstance(parsed, dict):
        logger.warning("Ignoring JSON document '%s': top level is %s, not an object", path, type(parsed).__name__)
        return None
    return parsed



def writeJsonAtomic(path: Path, data: Any, *, indent: int = 2) -> None:
    """
    Serializes `data` as indented UTF-8 JSON and swaps it into place.

    The text is fully rendered before anything touches the disk, and the target
    is replaced in one step, so readers never observe a partial document.
    """
    text = json.dumps(data, ensure_ascii=False, indent=indent)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmpPath = path.with_name(path.name + ".tmp")
    try:
        with open(tmpPath, "w", encoding="utf-8", newline="\n") as fl:
            fl.write(text)
            fl.write("\n")
        os.replace(tmpPath, path)
    finally:
        if tmpPath.exists():
            tmpPath.unlink()
