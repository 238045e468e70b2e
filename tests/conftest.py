import json
import sys
from pathlib import Path

import pytest

from packsbuilder.app.settings import PackSettings



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



@pytest.fixture()
def settings(tmp_path: Path) -> PackSettings:
    return PackSettings(
        baseDownloadUrl="https://test.com/packs/",
        outputDirectory=str(tmp_path / "output"),
    )



@pytest.fixture()
def make_pack(tmp_path: Path):
    """
    Factory creating a pack folder under tmp_path/packs with a manifest.json.
    Pass images={"numbers": ["00_sasso.png", ...]} to create empty image files.
    """
    def _make(
        dirName: str = "italian",
        *,
        internationalName: str = "Italian",
        version: str = "1.0.0",
        images: dict[str, list[str]] | None = None,
        manifest: dict | None = None,
    ) -> Path:
        packDir = tmp_path / "packs" / dirName
        packDir.mkdir(parents=True, exist_ok=True)
        payload = manifest if manifest is not None else {
            "international_name": internationalName,
            "native_name": "Italiano",
            "description": "Test description",
            "native_description": "Descrizione test",
            "version": version,
            "language_code": "it",
            "author": "Test Author",
        }
        (packDir / "manifest.json").write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        for category, names in (images or {}).items():
            categoryDir = packDir / "major_system" / "images" / category
            categoryDir.mkdir(parents=True, exist_ok=True)
            for name in names:
                (categoryDir / name).write_bytes(b"")
        return packDir

    return _make
