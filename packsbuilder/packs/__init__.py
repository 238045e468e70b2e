# packsbuilder/packs/__init__.py
from .types import ArchiveResult, CategorizedImageSet, DefaultsReport, Manifest
from .discovery import FileDiscovery, extractToken
from .defaults import DefaultsSynthesizer, mergeDefaults, normalizeCategoryName
from .archiver import PackArchiver, archiveFilename
from .catalog import Catalog, CatalogEntry, CatalogManager, parseArchiveFilename
from .pipeline import BatchResult, PackOutcome, PackPipeline

__all__ = [
    "ArchiveResult",
    "CategorizedImageSet",
    "DefaultsReport",
    "Manifest",
    "FileDiscovery",
    "extractToken",
    "DefaultsSynthesizer",
    "mergeDefaults",
    "normalizeCategoryName",
    "PackArchiver",
    "archiveFilename",
    "Catalog",
    "CatalogEntry",
    "CatalogManager",
    "parseArchiveFilename",
    "BatchResult",
    "PackOutcome",
    "PackPipeline",
]
