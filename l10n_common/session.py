"""
Session-scoped state for one mapping workflow.

A session owns the loaded languages, the per-language header toggles used by
flat documents, the game name, and the language-independent key registry and
mapping store. Every user action is one method call; nothing here is global,
so independent sessions can coexist (one per Streamlit browser tab, one per
CLI run, one per test).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set

import yaml

from .build import build_document, segments_frame
from .config import AppConfig, ConfigError
from .mapping import MappingStore
from .schema import LanguageDocument, Segment, SegmentationMode
from .segment import line_position, remove_row, resolve_segments

LOGGER = logging.getLogger(__name__)


class TranslationSession:
    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()
        self.registry = self.config.new_registry()
        self.mapping = MappingStore()
        self.languages: Dict[str, LanguageDocument] = {}
        self.header_lines: Dict[str, Set[int]] = {}
        self.game_name = ""

    # -- languages -----------------------------------------------------------------

    def replace_languages(self, documents: Mapping[str, LanguageDocument]) -> None:
        """
        Commit a completed load. The previous language set and header toggles are
        replaced wholesale; registry and mapping are kept.
        """

        self.languages = dict(documents)
        self.header_lines = {language: set() for language in self.languages}
        reference = self.reference_language
        self.game_name = self.languages[reference].title if reference else ""
        LOGGER.info(
            "Loaded %d language(s): %s (reference: %s)",
            len(self.languages),
            ", ".join(self.languages) or "<none>",
            reference or "<none>",
        )

    @property
    def reference_language(self) -> Optional[str]:
        if self.config.reference_language in self.languages:
            return self.config.reference_language
        return next(iter(self.languages), None)

    def segments_for(self, language: str) -> List[Segment]:
        document = self.languages[language]
        return resolve_segments(document, self.header_lines.get(language, set()), self.game_name)

    def mapping_candidates(self) -> List[Segment]:
        """Mapping-eligible segments of the reference language (title excluded)."""

        reference = self.reference_language
        if reference is None:
            return []
        return self.segments_for(reference)[1:]

    def toggle_header(self, language: str, line_index: int) -> bool:
        """Flip the header flag of one line of a flat document; returns the new state."""

        if language not in self.languages:
            raise KeyError(language)
        if self.languages[language].mode is not SegmentationMode.FLAT:
            raise ValueError(f"'{language}' has bold headers; only unformatted documents take header toggles")
        toggles = self.header_lines.setdefault(language, set())
        if line_index in toggles:
            toggles.discard(line_index)
            return False
        if not 0 <= line_index < len(self.languages[language].rows):
            raise IndexError(f"Line {line_index} out of range for '{language}'")
        toggles.add(line_index)
        return True

    def delete_line(self, segment_index: int, line_index: int) -> List[str]:
        """
        Remove content line `line_index` of mapping-eligible segment `segment_index`
        from every language that has it. Returns the languages that changed.
        """

        changed: List[str] = []
        for language, document in self.languages.items():
            toggles = self.header_lines.get(language, set())
            row_index = line_position(document, toggles, segment_index + 1, line_index)
            if row_index is None:
                LOGGER.debug("No line %d in segment %d for '%s'", line_index, segment_index, language)
                continue
            self.header_lines[language] = remove_row(document, row_index, toggles)
            changed.append(language)
        return changed

    # -- keys and mapping ------------------------------------------------------------

    def add_key(self, name: str) -> bool:
        return self.registry.add(name)

    def remove_key(self, name: str) -> bool:
        removed = self.registry.remove(name, self.mapping)
        if removed:
            LOGGER.info("Removed key '%s'", name)
        return removed

    def reorder_keys(self, from_index: int, to_index: int) -> None:
        self.registry.reorder(from_index, to_index)

    def restore_default_keys(self) -> None:
        self.registry.restore_defaults()

    def assign(self, header: str, key: str) -> None:
        if not key:
            self.mapping.unset(header)
            return
        self.mapping.set(header, key)

    def unassign(self, header: str) -> None:
        self.mapping.unset(header)

    # -- building ----------------------------------------------------------------------

    def build(self, language: str) -> Dict[str, Any]:
        return build_document(self.segments_for(language), self.mapping, self.registry, self.game_name)

    def build_all(self) -> Dict[str, Dict[str, Any]]:
        return {language: self.build(language) for language in self.languages}

    def summary_frame(self, language: str):
        return segments_frame(self.segments_for(language), self.mapping, self.registry)

    # -- session files -----------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_name": self.game_name,
            "keys": self.registry.keys,
            "mapping": self.mapping.as_dict(),
            "header_lines": {
                language: sorted(toggles) for language, toggles in self.header_lines.items() if toggles
            },
        }

    def apply_dict(self, data: Mapping[str, Any]) -> None:
        """
        Replay a saved session file onto this session.

        All fields are optional. Validation happens before anything is changed so
        a bad file leaves the session untouched.
        """

        if not isinstance(data, Mapping):
            raise ConfigError("Session file must be a mapping")

        keys = data.get("keys")
        if keys is not None and (isinstance(keys, str) or not isinstance(keys, list)):
            raise ConfigError("`keys` must be a list of key names")
        mapping = data.get("mapping") or {}
        if not isinstance(mapping, Mapping):
            raise ConfigError("`mapping` must be an object of header -> key")
        header_lines = data.get("header_lines") or {}
        if not isinstance(header_lines, Mapping):
            raise ConfigError("`header_lines` must be an object of language -> [line indices]")
        try:
            parsed_lines = {str(lang): {int(i) for i in indices} for lang, indices in header_lines.items()}
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid header_lines entry: {exc}") from exc
        if keys is not None:
            kept = {str(key).strip() for key in keys}
            missing = [key for key in self.registry.keys if self.registry.is_essential(key) and key not in kept]
            if missing:
                raise ConfigError(f"Session file drops core key(s): {', '.join(missing)}")

        if keys is not None:
            self.registry.replace(str(key) for key in keys)
        for header, key in mapping.items():
            # A null/empty key in a template means "not assigned yet".
            if key:
                self.mapping.set(str(header), str(key))
        for language, toggles in parsed_lines.items():
            if language not in self.languages:
                LOGGER.warning("Session file has header lines for unloaded language '%s'", language)
                continue
            if self.languages[language].mode is not SegmentationMode.FLAT:
                LOGGER.warning("Ignoring header lines for '%s': it has bold headers", language)
                continue
            limit = len(self.languages[language].rows)
            self.header_lines[language] = {i for i in toggles if 0 <= i < limit}
        if data.get("game_name") is not None:
            self.game_name = str(data["game_name"])


def dump_session_file(session: TranslationSession) -> str:
    return yaml.safe_dump(session.to_dict(), sort_keys=False, allow_unicode=True)


def load_session_file(session: TranslationSession, path_or_bytes: Any) -> None:
    """Apply a YAML/JSON session file given as a path, bytes or a file-like object."""

    try:
        if isinstance(path_or_bytes, (str, Path)):
            content = Path(path_or_bytes).read_text(encoding="utf-8")
        elif isinstance(path_or_bytes, (bytes, bytearray)):
            content = path_or_bytes.decode("utf-8")
        else:
            content = path_or_bytes.read().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Session file is not UTF-8 text: {exc}") from exc

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid session file: {exc}") from exc
    session.apply_dict(data)
