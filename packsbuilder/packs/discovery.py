# packsbuilder/packs/discovery.py
from __future__ import annotations

import json
import logging
from pathlib import Path, PurePath

import json5
from pydantic import ValidationError

from packsbuilder.app.settings import PackSettings
from packsbuilder.core.errors import DirectoryNotFound
from packsbuilder.packs.types import CategorizedImageSet, Manifest

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_NAMES",
    "IMAGE_EXTENSIONS",
    "FileDiscovery",
    "findManifestPath",
    "extractToken",
]



MANIFEST_NAMES: tuple[str, ...] = ("manifest.json", "manifest.json5")
IMAGE_EXTENSIONS: frozenset[str] = frozenset({".png", ".jpg", ".jpeg", ".webp"})



def findManifestPath(dirPath: Path) -> Path | None:
    for name in MANIFEST_NAMES:
        candidate = dirPath / name
        if candidate.is_file():
            return candidate
    return None



def extractToken(filename: str | None) -> str | None:
    """
    Returns the part of the filename stem before the first underscore.

        "00_sasso.png" -> "00"
        "A_apple.webp" -> "A"
        "_hidden.png"  -> None (nothing before the underscore)
        "plain.png"    -> None (no underscore)
    """
    if filename is None or not filename.strip():
        return None
    stem = PurePath(filename).stem
    token, sep, _rest = stem.partition("_")
    if not sep or not token:
        return None
    return token



def _loadManifestFile(path: Path) -> Manifest:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json5":
        rawJson = json5.loads(text)
    else:
        rawJson = json.loads(text)
    if not isinstance(rawJson, dict):
        raise ValueError(f"Manifest file '{path}' is not a JSON object")
    return Manifest.model_validate(rawJson)



class FileDiscovery:
    """
    Finds pack directories, reads their manifests and lists categorized images.

    Layout of a pack:
        <pack>/manifest.json
        <pack>/defaults.json                       (optional, see defaults.py)
        <pack>/<imagesSubpath>/<category>/<token>_<name>.<png|jpg|jpeg|webp>
    """

    def __init__(self, settings: PackSettings | None = None) -> None:
        self._settings = settings or PackSettings()

    # ----- Packs -----

    def findPackDirectories(self, root: Path | str) -> list[Path]:
        root = Path(root)
        if not root.is_dir():
            raise DirectoryNotFound(root)
        packs = [
            child for child in root.iterdir()
            if child.is_dir() and findManifestPath(child) is not None
        ]
        packs.sort(key=lambda path: path.name)
        return packs

    def readManifest(self, packDir: Path | str) -> Manifest | None:
        manifestPath = findManifestPath(Path(packDir))
        if manifestPath is None:
            return None
        try:
            return _loadManifestFile(manifestPath)
        except (OSError, UnicodeDecodeError, ValueError, ValidationError) as err:
            # json.JSONDecodeError and json5 parse errors are ValueErrors
            logger.warning("Error reading manifest from '%s': %s", manifestPath, err)
            return None

    # ----- Images -----

    def imagesRoot(self, packDir: Path | str) -> Path:
        return Path(packDir) / PurePath(self._settings.imagesSubpath)

    def discoverImages(self, packDir: Path | str) -> CategorizedImageSet:
        imagesRoot = self.imagesRoot(packDir)
        result: CategorizedImageSet = {}
        if not imagesRoot.is_dir():
            logger.debug("No images directory at '%s'", imagesRoot)
            return result

        for categoryDir in sorted(imagesRoot.iterdir(), key=lambda path: path.name):
            if not categoryDir.is_dir():
                continue
            images = sorted(
                entry.name for entry in categoryDir.iterdir()
                if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS
            )
            if images:
                result[categoryDir.name] = images
        return result

    def extractToken(self, filename: str | None) -> str | None:
        return extractToken(filename)
