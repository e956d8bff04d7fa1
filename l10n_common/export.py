from __future__ import annotations

import io
import json
import logging
import zipfile
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Protocol, Tuple

from .errors import EmptyInputError

if TYPE_CHECKING:
    from .session import TranslationSession

LOGGER = logging.getLogger(__name__)


class Archiver(Protocol):
    def bundle(self, files: Mapping[str, str], name: str) -> bytes:
        ...


class ZipArchiver:
    """Bundle {filename: text} pairs into an in-memory deflated zip."""

    def bundle(self, files: Mapping[str, str], name: str) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for filename, content in files.items():
                zf.writestr(filename, content.encode("utf-8"))
        LOGGER.info("Bundled %d file(s) into %s", len(files), name)
        return buffer.getvalue()


def archive_name(game_name: str, fallback: str = "translations") -> str:
    base = (game_name or "").strip() or fallback
    return f"{base}.zip"


def to_json_text(document: Mapping[str, object], indent: int = 2) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)


def build_payloads(session: "TranslationSession") -> Dict[str, str]:
    """Serialize every loaded language as `<lang>.json`, in load order."""

    if not session.languages:
        raise EmptyInputError("No languages loaded; nothing to export.")
    indent = session.config.json_indent
    return {f"{language}.json": to_json_text(session.build(language), indent) for language in session.languages}


def export_bundle(
    session: "TranslationSession",
    archiver: Optional[Archiver] = None,
) -> Optional[Tuple[str, bytes]]:
    """
    Build all languages and hand them to the archiver.

    Returns (archive_name, archive_bytes), or None when nothing is loaded.
    Session state is not modified.
    """

    try:
        payloads = build_payloads(session)
    except EmptyInputError as exc:
        LOGGER.info("%s", exc)
        return None

    name = archive_name(session.game_name, session.config.archive_fallback_name)
    archiver = archiver or ZipArchiver()
    return name, archiver.bundle(payloads, name)
