import json
import zipfile
from datetime import datetime, timezone

import pytest

from packsbuilder.core.errors import DirectoryNotFound
from packsbuilder.packs.pipeline import PackPipeline
from packsbuilder.packs.types import ArchiveResult


def fixed_clock():
    return datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture()
def pipeline(settings):
    return PackPipeline(settings, clock=fixed_clock)


def test_buildAll_archivesEveryPackAndIndexesThem(pipeline, settings, make_pack, tmp_path) -> None:
    make_pack("italian", internationalName="Italian", images={"numbers": ["00_sasso.png"]})
    make_pack("spanish", internationalName="Spanish", version="2.0.0")

    batch = pipeline.buildAll(tmp_path / "packs")

    assert batch.total == 2
    assert batch.succeeded == 2
    assert batch.summary() == "Completed: 2/2 packs processed successfully."
    assert (settings.outputDir / "italian_1.0.0.zip").is_file()
    assert (settings.outputDir / "spanish_2.0.0.zip").is_file()

    catalog = json.loads(settings.catalogPath.read_text(encoding="utf-8"))
    assert catalog["last_updated"] == "2025-01-02T03:04:05Z"
    assert [pack["filename"] for pack in catalog["packs"]] == ["italian_1.0.0.zip", "spanish_2.0.0.zip"]


def test_buildAll_doesNotTouchDefaults(pipeline, make_pack, tmp_path) -> None:
    packDir = make_pack(images={"numbers": ["00_sasso.png"]})

    pipeline.buildAll(tmp_path / "packs")

    assert not (packDir / "defaults.json").exists()


def test_buildAll_failureDoesNotAbortBatch(pipeline, settings, make_pack, tmp_path, monkeypatch) -> None:
    make_pack("english", internationalName="English")
    make_pack("italian", internationalName="Italian")
    realCreate = pipeline.archiver.createArchive

    def flaky(packDir):
        if packDir.name == "english":
            raise RuntimeError("boom")
        return realCreate(packDir)

    monkeypatch.setattr(pipeline.archiver, "createArchive", flaky)

    batch = pipeline.buildAll(tmp_path / "packs")

    assert batch.total == 2
    assert batch.succeeded == 1
    failed = next(outcome for outcome in batch.outcomes if not outcome.success)
    assert failed.packDir.name == "english"
    assert failed.error == "RuntimeError: boom"
    assert batch.summary() == "Completed: 1/2 packs processed successfully."

    catalog = json.loads(settings.catalogPath.read_text(encoding="utf-8"))
    assert [pack["international_name"] for pack in catalog["packs"]] == ["Italian"]


def test_buildAll_failedArchiveIsNotIndexed(pipeline, settings, make_pack, tmp_path, monkeypatch) -> None:
    make_pack()
    monkeypatch.setattr(pipeline.archiver, "createArchive", lambda packDir: ArchiveResult.failed())

    batch = pipeline.buildAll(tmp_path / "packs")

    assert batch.succeeded == 0
    assert batch.outcomes[0].error is None
    assert not settings.catalogPath.exists()


def test_buildAll_emptyRootYieldsEmptyBatch(pipeline, tmp_path) -> None:
    batch = pipeline.buildAll(tmp_path)

    assert batch.total == 0
    assert batch.summary() == "Completed: 0/0 packs processed successfully."


def test_buildAll_missingRootRaises(pipeline, tmp_path) -> None:
    with pytest.raises(DirectoryNotFound):
        pipeline.buildAll(tmp_path / "missing")


def test_discoverPacks_pairsFoldersWithManifests(pipeline, make_pack, tmp_path) -> None:
    make_pack("italian")
    broken = tmp_path / "packs" / "broken"
    broken.mkdir()
    (broken / "manifest.json").write_text("{", encoding="utf-8")

    packs = pipeline.discoverPacks(tmp_path / "packs")

    assert [(path.name, manifest is not None) for path, manifest in packs] == [
        ("broken", False),
        ("italian", True),
    ]


def test_initializeDefaults_thenBuild(pipeline, settings, make_pack, tmp_path) -> None:
    packDir = make_pack(images={"numbers": ["00_sasso.png"]})

    report = pipeline.initializeDefaults(packDir)
    batch = pipeline.buildAll(tmp_path / "packs")

    assert report.written
    assert batch.succeeded == 1
    with zipfile.ZipFile(settings.outputDir / "italian_1.0.0.zip") as archive:
        assert json.loads(archive.read("italian/defaults.json")) == {"numbers": {"00": "00_sasso.png"}}


def test_rebuildCatalog_delegatesToManager(pipeline, settings) -> None:
    settings.outputDir.mkdir(parents=True)
    (settings.outputDir / "german_3.1.zip").write_bytes(b"abc")

    catalog = pipeline.rebuildCatalog()

    assert [(entry.international_name, entry.version, entry.file_size) for entry in catalog.packs] == [
        ("German", "3.1", 3),
    ]


def test_buildAll_manifestWithNullFieldsStillBuilds(pipeline, settings, make_pack, tmp_path) -> None:
    make_pack(manifest={"international_name": "Italian", "version": "1.0.0", "author": None})

    batch = pipeline.buildAll(tmp_path / "packs")

    assert batch.succeeded == 1
    catalog = json.loads(settings.catalogPath.read_text(encoding="utf-8"))
    assert catalog["packs"][0]["author"] == ""
    assert catalog["packs"][0]["filename"] == "italian_1.0.0.zip"
