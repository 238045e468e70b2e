# packsbuilder/core/errors.py
from __future__ import annotations

__all__ = ["PacksBuilderError", "DirectoryNotFound", "SettingsError"]



class PacksBuilderError(Exception):
    """Base class for errors raised by packsbuilder."""
    pass



class DirectoryNotFound(PacksBuilderError, FileNotFoundError):
    """Raised when a directory the caller asked to scan does not exist."""
    def __init__(self, path) -> None:
        super().__init__(f"Root directory not found: {path}")
        self.path = path



class SettingsError(PacksBuilderError, ValueError):
    """Raised when configuration values fail validation."""
    pass
