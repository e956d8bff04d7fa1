from pathlib import Path

import openpyxl
import pytest
from openpyxl.styles import Font


def write_workbook(path: Path, rows):
    """Write (text, bold) pairs into column A of a fresh workbook."""

    wb = openpyxl.Workbook()
    ws = wb.active
    for index, (text, bold) in enumerate(rows, start=1):
        cell = ws.cell(row=index, column=1, value=text)
        if bold:
            cell.font = Font(bold=True)
    wb.save(path)
    return path


@pytest.fixture
def make_workbook(tmp_path):
    def _make(name, rows, folder=None):
        target = Path(folder) if folder else tmp_path
        target.mkdir(parents=True, exist_ok=True)
        return write_workbook(target / name, rows)

    return _make


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    # Keep developer .env / config overrides out of the tests.
    for var in ("L10N_CONFIG", "L10N_REFERENCE_LANGUAGE", "L10N_KEY_MODE", "L10N_ARCHIVE_FALLBACK"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
