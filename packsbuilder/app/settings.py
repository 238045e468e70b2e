# packsbuilder/app/settings.py
from __future__ import annotations
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

import json5
from pydantic import BaseModel, ConfigDict, JsonValue, ValidationError

from packsbuilder.core.errors import SettingsError

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "PackSettings", "SETTINGS_FILENAME", "ENV_OVERRIDES",
    "loadSettingsFile", "loadEnvOverrides", "loadSettings", "deepMerge",
]


SETTINGS_FILENAME = "packsbuilder.json5"
SETTINGS_SECTION = "packSettings"

# Environment variable -> settings key
ENV_OVERRIDES: dict[str, str] = {
    "PACKSBUILDER_BASE_URL": "baseDownloadUrl",
    "PACKSBUILDER_OUTPUT_DIR": "outputDirectory",
    "PACKSBUILDER_LOG_LEVEL": "logLevel",
}



class PackSettings(BaseModel):
    """Everything the pipeline components need, passed in explicitly at construction."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    baseDownloadUrl: str = "https://yourserver.com/packs/"
    outputDirectory: str = "./output"
    imagesSubpath: str = "major_system/images"
    catalogFilename: str = "major_system_packs.json"
    defaultsFilename: str = "defaults.json"
    logLevel: str = "INFO"
    logFile: str | None = None

    @property
    def outputDir(self) -> Path:
        return Path(self.outputDirectory)

    @property
    def catalogPath(self) -> Path:
        return self.outputDir / self.catalogFilename



def loadSettingsFile(path: Path) -> dict[str, JsonValue]:
    """
    Reads a json5 settings file. Values may sit at the top level or under "packSettings".
    A missing or unparseable file yields an empty mapping.
    """
    if not path.exists():
        return {}
    try:
        raw = json5.loads(path.read_text(encoding="utf-8"))
    except Exception as err:
        logger.error("Failed to parse '%s': %s", path, err)
        return {}
    if not isinstance(raw, Mapping):
        logger.error("Settings file '%s' must contain an object", path)
        return {}
    section = raw.get(SETTINGS_SECTION, raw)
    if not isinstance(section, Mapping):
        logger.error("'%s' in '%s' must be an object", SETTINGS_SECTION, path)
        return {}
    return dict(section)



def loadEnvOverrides(environ: Mapping[str, str] | None = None) -> dict[str, JsonValue]:
    environ = os.environ if environ is None else environ
    out: dict[str, JsonValue] = {}
    for envName, key in ENV_OVERRIDES.items():
        value = environ.get(envName)
        if value is not None and value.strip():
            out[key] = value.strip()
    return out



def loadSettings(
    configPath: Path | str | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> PackSettings:
    """
    Builds PackSettings from, lowest to highest precedence:
    built-in defaults, the json5 settings file, PACKSBUILDER_* environment
    variables, and explicit overrides (command line). None-valued overrides are ignored.
    """
    path = Path(configPath) if configPath is not None else Path.cwd() / SETTINGS_FILENAME
    merged: JsonValue = {}
    merged = deepMerge(merged, loadSettingsFile(path))
    merged = deepMerge(merged, loadEnvOverrides(environ))
    if overrides:
        merged = deepMerge(merged, {key: value for key, value in overrides.items() if value is not None})

    try:
        return PackSettings.model_validate(merged)
    except ValidationError as err:
        raise SettingsError(f"Invalid settings: {err}") from err



def deepMerge(first: JsonValue, second: JsonValue) -> JsonValue:
    """
    Returns a new JsonValue where keys from `second` override/extend `first`.
    Only merges recursively when BOTH sides are JSON objects (dicts).
    For all other JSON types the right-hand value `second` replaces `first`.
    """
    if isinstance(first, dict) and isinstance(second, dict):
        out: dict[str, JsonValue] = {}
        for key, value in first.items():
            out[key] = cast(JsonValue, value)
        for key, value in second.items():
            if key in out:
                out[key] = deepMerge(out[key], cast(JsonValue, value))
            else:
                out[key] = cast(JsonValue, value)
        return cast(JsonValue, out)

    return cast(JsonValue, second)
