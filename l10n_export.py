#!/usr/bin/env python3
"""Localization sheet exporter (openpyxl + Polars + Streamlit).

Turns a folder of per-language workbooks (`en.xlsx`, `fr.xlsx`, ...) into one
structured JSON document per language, bundled into a single zip.

Workflow
--------
1. ``python l10n_export.py template --input ./sheets --output session.yaml``
   lists the reference language's segment headers with fuzzy key suggestions.
2. Review ``session.yaml``: fix the ``mapping`` entries, reorder ``keys``,
   and for unformatted sheets list the header line indices under
   ``header_lines``.
3. ``python l10n_export.py export --input ./sheets --session session.yaml``
   writes ``<game name>.zip`` with one ``<lang>.json`` per workbook.

The same session file can be downloaded from / uploaded to the Streamlit
browser (``streamlit run l10n_browser/l10n_streamlit_app.py``).

Sample ``l10n_config.yaml``
---------------------------
```yaml
reference_language: en
keys:
  defaults: [game, rtp, description, wins, wild, scatter, features]
  accumulation: features
  mode: strict        # strict: default keys cannot be removed; open: nothing protected
files:
  extensions: [.xlsx]
  temp_prefix: "~$"
export:
  fallback_name: translations
  json_indent: 2
```
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import yaml

from l10n_browser.l10n_data import languages_frame, load_folder
from l10n_common.config import ConfigError, load_config
from l10n_common.export import export_bundle
from l10n_common.mapping import suggest_mapping
from l10n_common.session import TranslationSession, load_session_file

LOGGER = logging.getLogger(__name__)


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def open_session(args: argparse.Namespace) -> TranslationSession:
    """Load config and workbooks, then replay the optional session file."""

    config = load_config(args.config)
    session = TranslationSession(config)
    documents, report = load_folder(args.input, config)
    if report.skipped:
        LOGGER.warning("Skipped %d unreadable file(s): %s", len(report.skipped), ", ".join(report.skipped))
    if report.ignored:
        LOGGER.debug("Ignored: %s", ", ".join(report.ignored))
    session.replace_languages(documents)

    session_path: Optional[Path] = getattr(args, "session", None)
    if session_path:
        load_session_file(session, session_path)
        LOGGER.info("Applied session file %s (%d mapped header(s))", session_path, len(session.mapping))
    game_name = getattr(args, "game_name", None)
    if game_name is not None:
        session.game_name = game_name
    return session


def cmd_export(args: argparse.Namespace) -> int:
    session = open_session(args)
    result = export_bundle(session)
    if result is None:
        LOGGER.warning("No language workbooks found in %s; nothing exported.", args.input)
        return 0

    name, payload = result
    output: Path = args.output or Path(name)
    if output.is_dir():
        output = output / name
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    LOGGER.info("Wrote %s (%d language(s))", output, len(session.languages))
    return 0


def cmd_template(args: argparse.Namespace) -> int:
    session = open_session(args)
    headers = [segment.header for segment in session.mapping_candidates()]
    if not headers:
        LOGGER.warning("Reference language has no mappable segments.")

    suggestions = suggest_mapping(headers, session.registry.keys, threshold=args.threshold)
    data = session.to_dict()
    data["mapping"] = {header: (session.mapping.get(header) or suggestions.get(header) or None) for header in headers}

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    suggested = sum(1 for value in data["mapping"].values() if value)
    LOGGER.info("Wrote session template %s (%d/%d header(s) suggested)", args.output, suggested, len(headers))
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    session = open_session(args)
    if not session.languages:
        LOGGER.info("No languages loaded.")
        return 0

    LOGGER.info("Game name: %s", session.game_name or "<empty>")
    LOGGER.info("Keys: %s", ", ".join(session.registry.keys))
    LOGGER.info("Languages:\n%s", languages_frame(session))
    for language in session.languages:
        LOGGER.info("Segments for '%s':\n%s", language, session.summary_frame(language))
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert per-language localization workbooks into structured JSON.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    subparsers = parser.add_subparsers(dest="command")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--input", type=Path, required=True, help="Folder containing <lang>.xlsx workbooks.")
        sub.add_argument("--config", type=Path, help="Path to YAML config (default: $L10N_CONFIG or l10n_config.yaml).")

    export = subparsers.add_parser("export", help="Build every language and write the zip bundle.")
    add_common(export)
    export.add_argument("--session", type=Path, help="Session file (YAML/JSON) with keys and mapping.")
    export.add_argument("--game-name", help="Override the game name used for headers and the archive name.")
    export.add_argument("--output", type=Path, help="Zip path or directory (default: ./<game name>.zip).")
    export.set_defaults(func=cmd_export)

    template = subparsers.add_parser("template", help="Write a session file with suggested key assignments.")
    add_common(template)
    template.add_argument("--output", type=Path, required=True, help="Destination session file.")
    template.add_argument("--threshold", type=int, default=60, help="Fuzzy match score cutoff (0-100).")
    template.set_defaults(func=cmd_template)

    inspect = subparsers.add_parser("inspect", help="Log per-language segment summaries.")
    add_common(inspect)
    inspect.add_argument("--session", type=Path, help="Session file (YAML/JSON) with keys and mapping.")
    inspect.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 0

    configure_logging(args.verbose)
    try:
        return args.func(args)
    except (ConfigError, FileNotFoundError) as exc:
        LOGGER.error("%s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
