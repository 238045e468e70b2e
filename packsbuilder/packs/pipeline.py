# packsbuilder/packs/pipeline.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from packsbuilder.app.settings import PackSettings
from packsbuilder.core.logging import logContext
from packsbuilder.core.time import Clock, utcNow
from packsbuilder.packs.archiver import PackArchiver
from packsbuilder.packs.catalog import Catalog, CatalogManager
from packsbuilder.packs.defaults import DefaultsSynthesizer
from packsbuilder.packs.discovery import FileDiscovery
from packsbuilder.packs.types import ArchiveResult, DefaultsReport, Manifest

logger = logging.getLogger(__name__)

__all__ = [
    "PackOutcome",
    "BatchResult",
    "PackPipeline",
]



@dataclass(slots=True)
class PackOutcome:
    packDir: Path
    archive: ArchiveResult
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.archive.success and self.error is None



@dataclass(slots=True)
class BatchResult:
    outcomes: list[PackOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    def summary(self) -> str:
        return f"Completed: {self.succeeded}/{self.total} packs processed successfully."



class PackPipeline:
    """
    Wires discovery, defaults, archiving and the catalog together.

    Packs are handled strictly one after another. Whatever goes wrong while
    handling one pack is logged and counted; the next pack still runs.
    """

    def __init__(self, settings: PackSettings | None = None, *, clock: Clock = utcNow) -> None:
        self.settings = settings or PackSettings()
        self.discovery = FileDiscovery(self.settings)
        self.defaults = DefaultsSynthesizer(self.settings, self.discovery)
        self.archiver = PackArchiver(self.settings, self.discovery)
        self.catalog = CatalogManager(self.settings, self.discovery, clock=clock)

    # ----- Discovery -----

    def discoverPacks(self, root: Path | str) -> list[tuple[Path, Manifest | None]]:
        """Raises DirectoryNotFound when root is missing."""
        return [(packDir, self.discovery.readManifest(packDir)) for packDir in self.discovery.findPackDirectories(root)]

    # ----- Defaults -----

    def initializeDefaults(self, packDir: Path | str) -> DefaultsReport:
        packDir = Path(packDir)
        with logContext(pack=packDir.name):
            return self.defaults.synthesizeDefaults(packDir)

    # ----- Archives + catalog -----

    def buildPack(self, packDir: Path) -> PackOutcome:
        with logContext(pack=packDir.name):
            try:
                logger.info("Processing: %s", packDir.name)
                result = self.archiver.createArchive(packDir)
                if result.success and result.archivePath is not None:
                    self.catalog.upsert(packDir, result.archivePath, result.sizeBytes)
                return PackOutcome(packDir=packDir, archive=result)
            except Exception as err:
                logger.exception("Failed to process pack '%s'", packDir)
                return PackOutcome(packDir=packDir, archive=ArchiveResult.failed(), error=f"{type(err).__name__}: {err}")

    def buildAll(self, root: Path | str) -> BatchResult:
        """
        Archives every pack under root and records each archive in the catalog.
        Raises DirectoryNotFound when root is missing.
        """
        packDirs = self.discovery.findPackDirectories(root)
        batch = BatchResult()
        if not packDirs:
            logger.warning("No pack folders with a manifest found under '%s'", root)
            return batch

        logger.info("Found %d pack(s). Processing...", len(packDirs))
        for packDir in packDirs:
            batch.outcomes.append(self.buildPack(packDir))
        logger.info("%s", batch.summary())
        return batch

    def rebuildCatalog(self) -> Catalog | None:
        return self.catalog.rebuild()
