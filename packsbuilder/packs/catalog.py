# packsbuilder/packs/catalog.py
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from packsbuilder.app.settings import PackSettings
from packsbuilder.core.jsonutils import readJsonObject, writeJsonAtomic
from packsbuilder.core.time import Clock, isoUtc, utcNow
from packsbuilder.packs.archiver import ARCHIVE_EXTENSION
from packsbuilder.packs.discovery import FileDiscovery
from packsbuilder.packs.types import nullAsEmpty

logger = logging.getLogger(__name__)

__all__ = [
    "CatalogEntry",
    "Catalog",
    "CatalogManager",
    "buildDownloadUrl",
    "parseArchiveFilename",
    "titleCase",
]


DEFAULT_VERSION = "1.0.0"

TEXT_FIELDS = (
    "international_name", "native_name", "description", "native_description",
    "version", "language_code", "author", "filename", "download_url",
)



class CatalogEntry(BaseModel):
    """One published pack-version."""
    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    international_name: str = ""
    native_name: str = ""
    description: str = ""
    native_description: str = ""
    version: str = ""
    language_code: str = ""
    author: str = ""
    filename: str = ""
    file_size: int = 0
    download_url: str = ""

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def nullText(cls, value: Any) -> Any:
        return nullAsEmpty(value)

    @property
    def identity(self) -> tuple[str, str]:
        return (self.international_name, self.version)



class Catalog(BaseModel):
    """The master index: every entry, sorted by international_name."""
    model_config = ConfigDict(extra="ignore")

    last_updated: datetime = Field(default_factory=utcNow)
    packs: list[CatalogEntry] = Field(default_factory=list)

    @field_serializer("last_updated")
    def serializeLastUpdated(self, value: datetime) -> str:
        return isoUtc(value)

    def find(self, internationalName: str, version: str) -> CatalogEntry | None:
        for entry in self.packs:
            if entry.identity == (internationalName, version):
                return entry
        return None

    def sortEntries(self) -> None:
        # str ordering is ordinal (code point); sort is stable for equal names
        self.packs.sort(key=lambda entry: entry.international_name)



# ------------------------------------------------------------------ #
# Filename / URL helpers
# ------------------------------------------------------------------ #

def buildDownloadUrl(baseUrl: str, filename: str) -> str:
    return f"{baseUrl.rstrip('/')}/{filename}"



def titleCase(text: str) -> str:
    """
    Upper-cases the first character of every space-separated word and lower-cases the rest.
    Runs of spaces are kept as they are.
    """
    if not text.strip():
        return text
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))



def parseArchiveFilename(filename: str) -> tuple[str, str]:
    """
    Infers (display name, version) from an archive filename.

        "italian_1.0.0.zip"          -> ("Italian", "1.0.0")
        "italian_company_x_2.1.zip"  -> ("Italian Company X", "2.1")
        "spanish.zip"                -> ("Spanish", "1.0.0")
    """
    stem = Path(filename).stem
    cut = stem.rfind("_")
    if cut > 0:
        name = titleCase(stem[:cut].replace("_", " "))
        version = stem[cut + 1:] or DEFAULT_VERSION
    else:
        name = titleCase(stem.replace("_", " "))
        version = DEFAULT_VERSION
    return name, version



class CatalogManager:
    """
    Owns <outputDirectory>/<catalogFilename>.

    upsert() records one archive using its pack manifest; rebuild() throws the
    catalog away and re-derives it from the archive filenames alone.
    """

    def __init__(
        self,
        settings: PackSettings | None = None,
        discovery: FileDiscovery | None = None,
        *,
        clock: Clock = utcNow,
    ) -> None:
        self._settings = settings or PackSettings()
        self._discovery = discovery or FileDiscovery(self._settings)
        self._clock = clock

    @property
    def catalogPath(self) -> Path:
        return self._settings.catalogPath

    # ----- Persistence -----

    def load(self) -> Catalog:
        raw = readJsonObject(self.catalogPath)
        if raw is None:
            return Catalog(last_updated=self._clock())
        if raw.get("last_updated") is None:
            raw["last_updated"] = self._clock()
        try:
            return Catalog.model_validate(raw)
        except ValidationError as err:
            logger.warning("Ignoring malformed catalog '%s': %s", self.catalogPath, err)
            return Catalog(last_updated=self._clock())

    def save(self, catalog: Catalog) -> None:
        writeJsonAtomic(self.catalogPath, catalog.model_dump(mode="json"))

    # ----- Operations -----

    def upsert(self, packDir: Path | str, archivePath: Path | str, sizeBytes: int) -> CatalogEntry | None:
        manifest = self._discovery.readManifest(packDir)
        if manifest is None:
            logger.warning("No manifest in '%s'; catalog left unchanged", packDir)
            return None

        catalog = self.load()
        filename = Path(archivePath).name
        downloadUrl = buildDownloadUrl(self._settings.baseDownloadUrl, filename)

        entry = catalog.find(manifest.international_name, manifest.version)
        if entry is not None:
            entry.native_name = manifest.native_name
            entry.description = manifest.description
            entry.native_description = manifest.native_description
            entry.language_code = manifest.language_code
            entry.author = manifest.author
            entry.filename = filename
            entry.file_size = sizeBytes
            entry.download_url = downloadUrl
            logger.debug("Updated catalog entry %s %s", manifest.international_name, manifest.version)
        else:
            entry = CatalogEntry(
                international_name=manifest.international_name,
                native_name=manifest.native_name,
                description=manifest.description,
                native_description=manifest.native_description,
                version=manifest.version,
                language_code=manifest.language_code,
                author=manifest.author,
                filename=filename,
                file_size=sizeBytes,
                download_url=downloadUrl,
            )
            catalog.packs.append(entry)
            logger.debug("Added catalog entry %s %s", manifest.international_name, manifest.version)

        catalog.sortEntries()
        catalog.last_updated = self._clock()
        self.save(catalog)
        return entry

    def rebuild(self) -> Catalog | None:
        outputDir = self._settings.outputDir
        if not outputDir.is_dir():
            logger.warning("Output directory '%s' does not exist. No zips to scan.", outputDir)
            return None

        catalog = Catalog(last_updated=self._clock())
        seen: dict[tuple[str, str], str] = {}
        archives = sorted(
            (path for path in outputDir.iterdir() if path.is_file() and path.suffix.lower() == ARCHIVE_EXTENSION),
            key=lambda path: path.name,
        )
        for archive in archives:
            name, version = parseArchiveFilename(archive.name)
            if (name, version) in seen:
                logger.warning(
                    "Skipping '%s': %s %s is already listed from '%s'",
                    archive.name, name, version, seen[(name, version)],
                )
                continue
            seen[(name, version)] = archive.name
            description = f"Major system pack for {name}"
            catalog.packs.append(CatalogEntry(
                international_name=name,
                native_name=name,
                description=description,
                native_description=description,
                version=version,
                language_code="",
                author="",
                filename=archive.name,
                file_size=archive.stat().st_size,
                download_url=buildDownloadUrl(self._settings.baseDownloadUrl, archive.name),
            ))

        catalog.sortEntries()
        self.save(catalog)
        logger.info("Regenerated master index with %d pack(s).", len(catalog.packs))
        return catalog
