"""
Spreadsheet loading helpers for the localization exporter.

Each language ships as one workbook named `<lang>.xlsx`. Only the first
worksheet's first column is read; bold cells mark segment headers. Files are
parsed strictly one after another and the caller receives the whole result at
once, so a half-finished load is never visible to the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import openpyxl
import polars as pl

from l10n_common.config import AppConfig
from l10n_common.errors import UnreadableDocumentError
from l10n_common.schema import LanguageDocument, Row
from l10n_common.segment import segment_rows

LOGGER = logging.getLogger(__name__)


@dataclass
class LoadReport:
    loaded: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)


def _excel_source(path_or_bytes: Any) -> Any:
    """
    Return a rewindable Excel source for openpyxl.

    Bytes/BytesIO inputs are rewound to position 0; objects exposing getvalue()
    (Streamlit's UploadedFile) are coerced to bytes first.
    """

    if isinstance(path_or_bytes, BytesIO):
        path_or_bytes.seek(0)
        return path_or_bytes
    if isinstance(path_or_bytes, (bytes, bytearray)):
        return BytesIO(path_or_bytes)
    if isinstance(path_or_bytes, (str, Path)):
        return str(path_or_bytes)
    if hasattr(path_or_bytes, "getvalue"):
        return BytesIO(path_or_bytes.getvalue())
    return path_or_bytes


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_rows(path_or_bytes: Any, name: Optional[str] = None) -> List[Row]:
    """
    Read the first column of the first worksheet as Row(text, emphasized).

    Empty cells yield Row("") and are left for the segmenter to discard.
    """

    label = name or getattr(path_or_bytes, "name", None) or str(path_or_bytes)
    try:
        workbook = openpyxl.load_workbook(_excel_source(path_or_bytes), data_only=True)
    except Exception as exc:  # openpyxl surfaces zip, XML and key errors for corrupt files
        raise UnreadableDocumentError(str(label), str(exc)) from exc

    try:
        worksheet = workbook.worksheets[0]
        rows: List[Row] = []
        for (cell,) in worksheet.iter_rows(min_col=1, max_col=1):
            font = cell.font
            rows.append(Row(text=_cell_text(cell.value), emphasized=bool(font is not None and font.bold)))
        return rows
    finally:
        workbook.close()


def is_language_file(name: str, extensions: Sequence[str] = (".xlsx",), temp_prefix: str = "~$") -> bool:
    base = Path(name).name
    if temp_prefix and base.startswith(temp_prefix):
        return False
    return any(base.endswith(ext) for ext in extensions)


def language_from_filename(name: str) -> str:
    """`en.xlsx` -> `en`; everything after the first dot is dropped."""

    return Path(name).name.split(".")[0]


def load_language_files(
    files: Iterable[Tuple[str, Any]],
    config: Optional[AppConfig] = None,
) -> Tuple[Dict[str, LanguageDocument], LoadReport]:
    """
    Parse (file name, source) pairs into language documents, in input order.

    Non-spreadsheet and temporary files are ignored. A file that cannot be read
    is recorded in the report and the rest of the batch continues.
    """

    config = config or AppConfig()
    documents: Dict[str, LanguageDocument] = {}
    report = LoadReport()

    for name, source in files:
        if not is_language_file(name, config.file_extensions, config.temp_prefix):
            report.ignored.append(name)
            continue

        language = language_from_filename(name)
        try:
            rows = read_rows(source, name=name)
        except UnreadableDocumentError as exc:
            LOGGER.warning("Skipping %s: %s", name, exc.reason)
            report.skipped[name] = exc.reason
            continue

        if language in documents:
            LOGGER.warning("Language '%s' loaded twice; %s replaces the earlier file", language, name)
        document = segment_rows(language, rows)
        documents[language] = document
        report.loaded.append(name)
        LOGGER.info(
            "Read %s as '%s' (%s mode, %d rows, %d segments)",
            name,
            language,
            document.mode.value,
            len(document.rows),
            len(document.segments),
        )

    return documents, report


def find_files(folder: Path) -> List[Path]:
    return sorted(p for p in Path(folder).rglob("*") if p.is_file())


def load_folder(
    folder: Path,
    config: Optional[AppConfig] = None,
) -> Tuple[Dict[str, LanguageDocument], LoadReport]:
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Input folder not found: {folder}")
    return load_language_files(((path.name, path) for path in find_files(folder)), config)


def languages_frame(session) -> pl.DataFrame:
    """One row per loaded language: mode, row/segment counts and mapped segments."""

    records = []
    for language, document in session.languages.items():
        frame = session.summary_frame(language)
        records.append(
            {
                "language": language,
                "mode": document.mode.value,
                "rows": len(document.rows),
                "segments": frame.height,
                "mapped": frame.filter(pl.col("key") != "").height,
            }
        )
    schema = {"language": pl.Utf8, "mode": pl.Utf8, "rows": pl.Int64, "segments": pl.Int64, "mapped": pl.Int64}
    if not records:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame(records, schema=schema)


__all__ = [
    "LoadReport",
    "read_rows",
    "is_language_file",
    "language_from_filename",
    "load_language_files",
    "find_files",
    "load_folder",
    "languages_frame",
]
