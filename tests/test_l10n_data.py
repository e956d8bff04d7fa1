from io import BytesIO

import pytest

from l10n_browser.l10n_data import (
    is_language_file,
    language_from_filename,
    languages_frame,
    load_folder,
    load_language_files,
    read_rows,
)
from l10n_common.errors import UnreadableDocumentError
from l10n_common.schema import Row, SegmentationMode
from l10n_common.session import TranslationSession


def test_read_rows_detects_bold_cells(make_workbook):
    path = make_workbook("en.xlsx", [("Title", True), ("Game X", False), (None, False), (96, False)])

    rows = read_rows(path)

    assert rows == [Row("Title", True), Row("Game X", False), Row("", False), Row("96", False)]


def test_read_rows_rewinds_bytesio(make_workbook):
    path = make_workbook("en.xlsx", [("Title", True)])
    buffer = BytesIO(path.read_bytes())
    buffer.read()  # consumed by an earlier reader

    assert read_rows(buffer) == [Row("Title", True)]


def test_read_rows_rejects_non_spreadsheet(tmp_path):
    bogus = tmp_path / "de.xlsx"
    bogus.write_text("not a workbook", encoding="utf-8")

    with pytest.raises(UnreadableDocumentError) as excinfo:
        read_rows(bogus)
    assert excinfo.value.name.endswith("de.xlsx")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("en.xlsx", True),
        ("sub/fr.xlsx", True),
        ("~$en.xlsx", False),
        ("notes.txt", False),
        ("en.xls", False),
    ],
)
def test_is_language_file(name, expected):
    assert is_language_file(name) is expected


def test_language_from_filename_uses_text_before_first_dot():
    assert language_from_filename("en.xlsx") == "en"
    assert language_from_filename("pt.BR.xlsx") == "pt"
    assert language_from_filename("folder/zh-Hans.xlsx") == "zh-Hans"


def test_load_language_files_isolates_bad_files(make_workbook, tmp_path):
    en = make_workbook("en.xlsx", [("Title", True), ("RTP", True), ("96%", False)])
    fr = make_workbook("fr.xlsx", [("RTP", False), ("96 %", False)])
    broken = tmp_path / "de.xlsx"
    broken.write_bytes(b"garbage")

    documents, report = load_language_files(
        [("en.xlsx", en), ("de.xlsx", broken), ("fr.xlsx", fr.read_bytes()), ("readme.md", b"")]
    )

    assert list(documents) == ["en", "fr"]
    assert documents["en"].mode is SegmentationMode.EMPHASIS_DRIVEN
    assert documents["fr"].mode is SegmentationMode.FLAT
    assert report.loaded == ["en.xlsx", "fr.xlsx"]
    assert report.ignored == ["readme.md"]
    assert list(report.skipped) == ["de.xlsx"]


def test_duplicate_language_keeps_last_file(make_workbook, tmp_path):
    first = make_workbook("en.xlsx", [("Old", True)], folder=tmp_path / "a")
    second = make_workbook("en.xlsx", [("New", True)], folder=tmp_path / "b")

    documents, report = load_language_files([("en.xlsx", first), ("en.xlsx", second)])

    assert documents["en"].title == "New"
    assert len(report.loaded) == 2


def test_load_folder(make_workbook, tmp_path):
    folder = tmp_path / "sheets"
    make_workbook("fr.xlsx", [("Jeu", True)], folder=folder)
    make_workbook("en.xlsx", [("Game", True)], folder=folder)
    make_workbook("~$en.xlsx", [("Lock", True)], folder=folder)

    documents, report = load_folder(folder)

    assert list(documents) == ["en", "fr"]
    assert report.ignored == ["~$en.xlsx"]


def test_load_folder_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_folder(tmp_path / "nope")


def test_languages_frame(make_workbook):
    path = make_workbook("en.xlsx", [("Title", True), ("RTP", True), ("96%", False), ("Wild", True)])
    documents, _ = load_language_files([("en.xlsx", path)])
    session = TranslationSession()
    session.replace_languages(documents)
    session.assign("RTP", "rtp")

    frame = languages_frame(session)

    assert frame.to_dicts() == [
        {"language": "en", "mode": "emphasis", "rows": 4, "segments": 2, "mapped": 1},
    ]


def test_languages_frame_empty():
    frame = languages_frame(TranslationSession())
    assert frame.height == 0
    assert frame.columns == ["language", "mode", "rows", "segments", "mapped"]
