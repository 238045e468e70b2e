# packsbuilder/packs/archiver.py
from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path

from packsbuilder.app.settings import PackSettings
from packsbuilder.packs.discovery import FileDiscovery
from packsbuilder.packs.types import ArchiveResult, Manifest

logger = logging.getLogger(__name__)

__all__ = [
    "ARCHIVE_EXTENSION",
    "PackArchiver",
    "archiveFilename",
]



ARCHIVE_EXTENSION = ".zip"



def archiveFilename(manifest: Manifest) -> str:
    """
    "Italian Company-X" + "1.0.0-beta" -> "italian_company_x_1.0.0-beta.zip"
    """
    safeName = manifest.international_name.lower().replace(" ", "_").replace("-", "_")
    safeVersion = manifest.version.replace(" ", "_")
    return f"{safeName}_{safeVersion}{ARCHIVE_EXTENSION}"



def _iterTree(rootDir: Path) -> tuple[list[Path], list[Path]]:
    """
    Returns (directories, files) under rootDir as sorted relative paths.
    """
    dirs: list[Path] = []
    files: list[Path] = []
    for curRoot, curDirs, curFiles in os.walk(rootDir):
        curDirs.sort()
        relRoot = Path(curRoot).relative_to(rootDir)
        for name in curDirs:
            dirs.append(relRoot / name)
        for name in sorted(curFiles):
            files.append(relRoot / name)
    dirs.sort(key=lambda path: path.as_posix())
    files.sort(key=lambda path: path.as_posix())
    return dirs, files



class PackArchiver:
    """
    Zips one pack directory into <outputDirectory>/<name>_<version>.zip.

    Entries live under a single top-level folder named after the pack directory,
    e.g. "italian/manifest.json", "italian/major_system/images/numbers/00_sasso.png".
    An archive that already exists is never rebuilt.
    """

    def __init__(self, settings: PackSettings | None = None, discovery: FileDiscovery | None = None) -> None:
        self._settings = settings or PackSettings()
        self._discovery = discovery or FileDiscovery(self._settings)

    @property
    def outputDir(self) -> Path:
        return self._settings.outputDir

    def createArchive(self, packDir: Path | str) -> ArchiveResult:
        packDir = Path(packDir)
        manifest = self._discovery.readManifest(packDir)
        if manifest is None:
            logger.error("No manifest found in '%s'", packDir)
            return ArchiveResult.failed()

        filename = archiveFilename(manifest)
        outputPath = self.outputDir / filename

        try:
            self.outputDir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            logger.error("Cannot create output directory '%s': %s", self.outputDir, err)
            return ArchiveResult.failed()

        if outputPath.exists():
            size = outputPath.stat().st_size
            logger.info("Zip already exists: %s (%d bytes)", filename, size)
            return ArchiveResult(success=True, archivePath=outputPath, sizeBytes=size)

        try:
            self._writeArchive(packDir, outputPath)
        except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as err:
            logger.error("Error creating zip for '%s': %s", packDir.name, err)
            return ArchiveResult.failed()

        size = outputPath.stat().st_size
        logger.info("Created zip: %s (%d bytes)", filename, size)
        return ArchiveResult(success=True, archivePath=outputPath, sizeBytes=size)

    def _writeArchive(self, sourceDir: Path, destination: Path) -> None:
        rootName = sourceDir.resolve().name
        partial = destination.with_name(destination.name + ".partial")
        if partial.exists():
            partial.unlink()

        dirs, files = _iterTree(sourceDir)
        try:
            with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
                # Explicit directory entries keep empty folders.
                for relDir in dirs:
                    archive.write(sourceDir / relDir, f"{rootName}/{relDir.as_posix()}/")
                for relFile in files:
                    archive.write(sourceDir / relFile, f"{rootName}/{relFile.as_posix()}")
            os.replace(partial, destination)
        finally:
            if partial.exists():
                partial.unlink()
