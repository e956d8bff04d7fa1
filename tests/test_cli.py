import json
import zipfile

import yaml

import l10n_export


def _sheets(make_workbook, tmp_path):
    folder = tmp_path / "sheets"
    make_workbook("en.xlsx", [("Lucky Game", True), ("RTP", True), ("96%", False), ("Wild", True), ("Subs", False)], folder=folder)
    make_workbook("fr.xlsx", [("Jeu", True), ("RTP", True), ("96 %", False), ("Wild", True), ("Remplace", False)], folder=folder)
    return folder


def test_template_then_export(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    session_file = tmp_path / "session.yaml"

    assert l10n_export.main(["template", "--input", str(folder), "--output", str(session_file)]) == 0
    template = yaml.safe_load(session_file.read_text(encoding="utf-8"))
    assert template["mapping"] == {"RTP": "rtp", "Wild": "wild"}
    assert template["game_name"] == "Lucky Game"

    out_dir = tmp_path / "out"
    out_dir.mkdir()
    code = l10n_export.main(
        ["export", "--input", str(folder), "--session", str(session_file), "--output", str(out_dir)]
    )

    assert code == 0
    archive = out_dir / "Lucky Game.zip"
    with zipfile.ZipFile(archive) as zf:
        assert sorted(zf.namelist()) == ["en.json", "fr.json"]
        fr = json.loads(zf.read("fr.json").decode("utf-8"))
    assert fr["header"] == "Lucky Game"
    assert fr["rtp"] == {"header": "RTP", "content": "96 %"}
    assert fr["wild"] == {"header": "Wild", "content": "Remplace"}


def test_export_game_name_override(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    target = tmp_path / "bundle.zip"

    code = l10n_export.main(["export", "--input", str(folder), "--game-name", "  ", "--output", str(target)])

    assert code == 0
    with zipfile.ZipFile(target) as zf:
        en = json.loads(zf.read("en.json").decode("utf-8"))
    assert en["header"] == "  "
    assert en["rtp"] == {"header": "", "content": ""}


def test_export_without_workbooks_writes_nothing(tmp_path):
    folder = tmp_path / "empty"
    folder.mkdir()

    assert l10n_export.main(["export", "--input", str(folder)]) == 0
    assert not (tmp_path / "translations.zip").exists()


def test_missing_input_folder_returns_error(tmp_path):
    assert l10n_export.main(["inspect", "--input", str(tmp_path / "missing")]) == 2


def test_bad_config_returns_error(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    config = tmp_path / "bad.yaml"
    config.write_text("keys:\n  mode: loose\n", encoding="utf-8")

    assert l10n_export.main(["inspect", "--input", str(folder), "--config", str(config)]) == 2


def test_inspect_runs(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    assert l10n_export.main(["inspect", "--input", str(folder)]) == 0


def test_no_command_prints_help(capsys):
    assert l10n_export.main([]) == 0
    assert "export" in capsys.readouterr().out


def test_unreadable_session_file_returns_error(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    session_file = tmp_path / "session.yaml"
    session_file.write_bytes(b"\xff\xfe\x00garbage")

    code = l10n_export.main(["export", "--input", str(folder), "--session", str(session_file)])

    assert code == 2
    assert not (tmp_path / "Lucky Game.zip").exists()


def test_malformed_config_section_returns_error(make_workbook, tmp_path):
    folder = _sheets(make_workbook, tmp_path)
    config = tmp_path / "config.yaml"
    config.write_text("keys: [a, b]\n", encoding="utf-8")

    assert l10n_export.main(["inspect", "--input", str(folder), "--config", str(config)]) == 2
