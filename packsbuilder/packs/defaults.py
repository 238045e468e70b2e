# packsbuilder/packs/defaults.py
from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from packsbuilder.app.settings import PackSettings
from packsbuilder.core.jsonutils import readJsonObject, writeJsonAtomic
from packsbuilder.packs.discovery import FileDiscovery, extractToken
from packsbuilder.packs.types import CategorizedImageSet, DefaultsReport

logger = logging.getLogger(__name__)

__all__ = [
    "DefaultsSynthesizer",
    "normalizeCategoryName",
    "mergeDefaults",
    "diffDefaults",
]



def normalizeCategoryName(category: str) -> str:
    return category.lower().replace("-", "_").replace(" ", "_")



def mergeDefaults(existing: Mapping[str, Any], imagesByCategory: CategorizedImageSet) -> dict[str, Any]:
    """
    Returns a new defaults tree with every discovered (category, token) that
    `existing` does not already map. `existing` itself is never mutated.

    For each token only the first filename (in discovery order) is used.
    Values already present win, so hand-edited choices survive regeneration.
    Top-level keys that are not image categories pass through untouched.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(existing))

    for category, images in imagesByCategory.items():
        categoryKey = normalizeCategoryName(category)
        categoryDefaults = merged.setdefault(categoryKey, {})
        if not isinstance(categoryDefaults, dict):
            logger.warning(
                "Defaults key '%s' holds %s, not an object; leaving it as is",
                categoryKey, type(categoryDefaults).__name__,
            )
            continue

        for image in images:
            token = extractToken(image)
            if token is None:
                continue
            if token not in categoryDefaults:
                categoryDefaults[token] = image

    return merged



def diffDefaults(old: Mapping[str, Any], new: Mapping[str, Any]) -> tuple[list[str], dict[str, list[str]]]:
    """Returns (added categories, {pre-existing category: added tokens})."""
    addedCategories: list[str] = []
    addedTokens: dict[str, list[str]] = {}
    for category, value in new.items():
        if category not in old:
            addedCategories.append(category)
            continue
        oldCategory = old[category]
        if not isinstance(value, Mapping) or not isinstance(oldCategory, Mapping):
            continue
        tokens = [token for token in value if token not in oldCategory]
        if tokens:
            addedTokens[category] = tokens
    return addedCategories, addedTokens



class DefaultsSynthesizer:
    """
    Keeps <pack>/defaults.json in step with the images a pack ships, additively.
    """

    def __init__(self, settings: PackSettings | None = None, discovery: FileDiscovery | None = None) -> None:
        self._settings = settings or PackSettings()
        self._discovery = discovery or FileDiscovery(self._settings)

    def defaultsPath(self, packDir: Path | str) -> Path:
        return Path(packDir) / self._settings.defaultsFilename

    def loadDefaults(self, packDir: Path | str) -> dict[str, Any]:
        return readJsonObject(self.defaultsPath(packDir)) or {}

    def synthesizeDefaults(self, packDir: Path | str) -> DefaultsReport:
        defaultsPath = self.defaultsPath(packDir)
        report = DefaultsReport(defaultsPath=defaultsPath)

        imagesByCategory = self._discovery.discoverImages(packDir)
        if not imagesByCategory:
            logger.info("No images found in pack '%s'", packDir)
            return report

        existing = self.loadDefaults(packDir)
        merged = mergeDefaults(existing, imagesByCategory)

        writeJsonAtomic(defaultsPath, merged)
        report.written = True
        report.addedCategories, report.addedTokens = diffDefaults(existing, merged)

        for line in report.lines():
            logger.info("%s", line)
        return report
