"""
Shared segmentation, schema-mapping and export helpers used by both the CLI
exporter and the Streamlit browser.
"""

from .schema import (  # noqa: F401
    DEFAULT_ACCUMULATION_KEY,
    DEFAULT_KEYS,
    RESERVED_KEY,
    HeaderText,
    KeyRegistry,
    LanguageDocument,
    Row,
    Segment,
    SegmentationMode,
)

from .errors import (  # noqa: F401
    DuplicateKeyError,
    EmptyInputError,
    L10nError,
    ProtectedKeyError,
    UnreadableDocumentError,
)

from .mapping import MappingStore, suggest_mapping  # noqa: F401
from .segment import (  # noqa: F401
    detect_mode,
    resolve_segments,
    segment_emphasized,
    segment_flat,
    segment_rows,
)
from .build import build_document, segments_frame  # noqa: F401
from .config import AppConfig, ConfigError, load_config  # noqa: F401
from .session import TranslationSession, dump_session_file, load_session_file  # noqa: F401
from .export import ZipArchiver, archive_name, build_payloads, export_bundle  # noqa: F401

__all__ = [
    "DEFAULT_ACCUMULATION_KEY",
    "DEFAULT_KEYS",
    "RESERVED_KEY",
    "HeaderText",
    "KeyRegistry",
    "LanguageDocument",
    "Row",
    "Segment",
    "SegmentationMode",
    "DuplicateKeyError",
    "EmptyInputError",
    "L10nError",
    "ProtectedKeyError",
    "UnreadableDocumentError",
    "MappingStore",
    "suggest_mapping",
    "detect_mode",
    "resolve_segments",
    "segment_emphasized",
    "segment_flat",
    "segment_rows",
    "build_document",
    "segments_frame",
    "AppConfig",
    "ConfigError",
    "load_config",
    "TranslationSession",
    "dump_session_file",
    "load_session_file",
    "ZipArchiver",
    "archive_name",
    "build_payloads",
    "export_bundle",
]
