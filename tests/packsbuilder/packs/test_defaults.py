import json

import pytest

from packsbuilder.packs.defaults import (
    DefaultsSynthesizer,
    diffDefaults,
    mergeDefaults,
    normalizeCategoryName,
)


def read_defaults(packDir):
    return json.loads((packDir / "defaults.json").read_text(encoding="utf-8"))


@pytest.fixture()
def numbers_pack(make_pack):
    return make_pack(images={"numbers": ["00_sasso.png", "01_te.png"]})


def test_synthesize_createsNewDefaultsFile(numbers_pack) -> None:
    report = DefaultsSynthesizer().synthesizeDefaults(numbers_pack)

    assert read_defaults(numbers_pack) == {"numbers": {"00": "00_sasso.png", "01": "01_te.png"}}
    assert report.written
    assert report.addedCategories == ["numbers"]
    assert report.addedTokens == {}


def test_synthesize_neverOverwritesExistingTokens(numbers_pack) -> None:
    (numbers_pack / "defaults.json").write_text(
        json.dumps({"numbers": {"00": "00_custom.png", "02": "02_existing.png"}}),
        encoding="utf-8",
    )

    report = DefaultsSynthesizer().synthesizeDefaults(numbers_pack)

    numbers = read_defaults(numbers_pack)["numbers"]
    assert numbers["00"] == "00_custom.png"
    assert numbers["02"] == "02_existing.png"
    assert numbers["01"] == "01_te.png"
    assert report.addedCategories == []
    assert report.addedTokens == {"numbers": ["01"]}


def test_synthesize_addsNewCategory(make_pack) -> None:
    packDir = make_pack(images={"numbers": ["00_sasso.png"], "Letters-Upper": ["A_apple.png"]})
    (packDir / "defaults.json").write_text(json.dumps({"numbers": {"00": "00_sasso.png"}}), encoding="utf-8")

    report = DefaultsSynthesizer().synthesizeDefaults(packDir)

    assert read_defaults(packDir)["letters_upper"] == {"A": "A_apple.png"}
    assert report.addedCategories == ["letters_upper"]
    assert not report.addedTokens


def test_synthesize_noImagesWritesNothing(make_pack) -> None:
    packDir = make_pack()
    (packDir / "major_system" / "images").mkdir(parents=True)

    report = DefaultsSynthesizer().synthesizeDefaults(packDir)

    assert not (packDir / "defaults.json").exists()
    assert not report.written
    assert report.lines() == ["No images found in pack."]


def test_synthesize_isIdempotent(numbers_pack) -> None:
    synthesizer = DefaultsSynthesizer()
    synthesizer.synthesizeDefaults(numbers_pack)
    first = (numbers_pack / "defaults.json").read_bytes()

    report = synthesizer.synthesizeDefaults(numbers_pack)

    assert (numbers_pack / "defaults.json").read_bytes() == first
    assert not report.changed
    assert report.lines() == ["No changes made to defaults.json"]


def test_synthesize_malformedDefaultsTreatedAsEmpty(numbers_pack) -> None:
    (numbers_pack / "defaults.json").write_text("{oops", encoding="utf-8")

    DefaultsSynthesizer().synthesizeDefaults(numbers_pack)

    assert read_defaults(numbers_pack) == {"numbers": {"00": "00_sasso.png", "01": "01_te.png"}}


def test_synthesize_preservesUnknownTopLevelKeys(numbers_pack) -> None:
    (numbers_pack / "defaults.json").write_text(
        json.dumps({"schema_note": {"by": "hand"}, "flags": [1, 2]}),
        encoding="utf-8",
    )

    DefaultsSynthesizer().synthesizeDefaults(numbers_pack)

    data = read_defaults(numbers_pack)
    assert data["schema_note"] == {"by": "hand"}
    assert data["flags"] == [1, 2]
    assert "numbers" in data


def test_synthesize_writesIndentedJson(numbers_pack) -> None:
    DefaultsSynthesizer().synthesizeDefaults(numbers_pack)

    text = (numbers_pack / "defaults.json").read_text(encoding="utf-8")
    assert text.startswith('{\n  "numbers": {\n    "00": "00_sasso.png"')


def test_mergeDefaults_firstFilenamePerTokenWins() -> None:
    merged = mergeDefaults({}, {"numbers": ["07_a.png", "07_b.png", "plain.png", "_x.png"]})

    assert merged == {"numbers": {"07": "07_a.png"}}


def test_mergeDefaults_doesNotMutateInput() -> None:
    existing = {"numbers": {"00": "00_custom.png"}}

    merged = mergeDefaults(existing, {"numbers": ["01_te.png"]})

    assert existing == {"numbers": {"00": "00_custom.png"}}
    assert merged == {"numbers": {"00": "00_custom.png", "01": "01_te.png"}}


def test_mergeDefaults_leavesNonObjectCategoryAlone() -> None:
    merged = mergeDefaults({"numbers": "locked"}, {"numbers": ["00_sasso.png"]})

    assert merged == {"numbers": "locked"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("numbers",         "numbers"),
        ("Letters Upper",   "letters_upper"),
        ("letters-lower",   "letters_lower"),
        ("Big - Mixed",     "big___mixed"),
    ],
)
def test_normalizeCategoryName(raw, expected) -> None:
    assert normalizeCategoryName(raw) == expected


def test_diffDefaults_reportsCategoriesAndTokens() -> None:
    old = {"numbers": {"00": "a"}, "months": {"jan": "b"}}
    new = {"numbers": {"00": "a", "01": "c"}, "months": {"jan": "b"}, "symbols": {"x": "d"}}

    assert diffDefaults(old, new) == (["symbols"], {"numbers": ["01"]})
