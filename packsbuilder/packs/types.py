# packsbuilder/packs/types.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

__all__ = [
    "Manifest",
    "CategorizedImageSet",
    "ArchiveResult",
    "DefaultsReport",
    "nullAsEmpty",
]


# category name -> image filenames, sorted
CategorizedImageSet: TypeAlias = dict[str, list[str]]



def nullAsEmpty(value: Any) -> Any:
    """JSON null in a text field reads as ""."""
    return "" if value is None else value



class Manifest(BaseModel):
    """Pack metadata read from manifest.json. Unknown keys are ignored, null reads as ""."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    international_name: str = ""
    native_name: str = ""
    description: str = ""
    native_description: str = ""
    version: str = ""
    language_code: str = ""
    author: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def nullText(cls, value: Any) -> Any:
        return nullAsEmpty(value)

    @property
    def identity(self) -> tuple[str, str]:
        return (self.international_name, self.version)



@dataclass(frozen=True, slots=True)
class ArchiveResult:
    success: bool
    archivePath: Path | None
    sizeBytes: int

    @classmethod
    def failed(cls) -> "ArchiveResult":
        return cls(success=False, archivePath=None, sizeBytes=0)



@dataclass(slots=True)
class DefaultsReport:
    """
    Outcome of one defaults synthesis run.

    `written` is False only when no images were found and nothing touched the disk.
    """
    defaultsPath: Path
    written: bool = False
    addedCategories: list[str] = field(default_factory=list)
    # pre-existing category -> tokens added to it
    addedTokens: dict[str, list[str]] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.addedCategories or self.addedTokens)

    def lines(self) -> list[str]:
        if not self.written:
            return ["No images found in pack."]
        out: list[str] = []
        if self.addedCategories:
            out.append(f"Added categories: {', '.join(self.addedCategories)}")
        for category, tokens in self.addedTokens.items():
            out.append(f"Added {len(tokens)} new token(s) to category '{category}'")
        if not self.changed:
            out.append(f"No changes made to {self.defaultsPath.name}")
        else:
            out.append(f"{self.defaultsPath.name} updated successfully.")
        return out
