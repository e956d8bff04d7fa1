from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional, Set

from .schema import LanguageDocument, Row, Segment, SegmentationMode


def _clean_rows(rows: Iterable[Row]) -> List[Row]:
    cleaned: List[Row] = []
    for row in rows:
        text = (row.text or "").strip()
        if not text:
            continue
        cleaned.append(Row(text=text, emphasized=bool(row.emphasized)))
    return cleaned


def detect_mode(rows: Iterable[Row]) -> SegmentationMode:
    """Emphasis-driven when any non-empty row is emphasized, flat otherwise."""

    for row in _clean_rows(rows):
        if row.emphasized:
            return SegmentationMode.EMPHASIS_DRIVEN
    return SegmentationMode.FLAT


def segment_emphasized(rows: Iterable[Row]) -> List[Segment]:
    """
    Group rows into segments at emphasized rows.

    Plain rows before the first emphasized row have no segment to join and are
    dropped. Two emphasized rows in a row produce a segment with empty content.
    """

    segments: List[Segment] = []
    header: Optional[str] = None
    lines: List[str] = []

    for row in _clean_rows(rows):
        if row.emphasized:
            if header is not None:
                segments.append(Segment(header, "\n".join(lines)))
            header = row.text
            lines = []
        elif header is not None:
            lines.append(row.text)

    if header is not None:
        segments.append(Segment(header, "\n".join(lines)))
    return segments


def segment_flat(lines: Iterable[str], header_lines: AbstractSet[int] = frozenset(), game_name: str = "") -> List[Segment]:
    """
    Segment an unformatted document using manually toggled header lines.

    Segment 0 is a placeholder titled with the current game name; lines before
    the first toggled header belong to it, so with no toggles the whole
    document is a single segment.
    """

    segments: List[Segment] = []
    header = game_name or ""
    current: List[str] = []

    for index, line in enumerate(lines):
        if index in header_lines:
            segments.append(Segment(header, "\n".join(current)))
            header = line
            current = []
        else:
            current.append(line)

    segments.append(Segment(header, "\n".join(current)))
    return segments


def segment_rows(language: str, rows: Iterable[Row]) -> LanguageDocument:
    """Pick the segmentation mode for a freshly read document and segment it."""

    cleaned = _clean_rows(rows)
    mode = detect_mode(cleaned)
    segments = segment_emphasized(cleaned) if mode is SegmentationMode.EMPHASIS_DRIVEN else []
    return LanguageDocument(language=language, mode=mode, rows=cleaned, segments=segments)


def _header_positions(document: LanguageDocument, header_lines: AbstractSet[int]) -> AbstractSet[int]:
    if document.mode is SegmentationMode.FLAT:
        return header_lines
    return {index for index, row in enumerate(document.rows) if row.emphasized}


def line_position(
    document: LanguageDocument,
    header_lines: AbstractSet[int],
    segment_index: int,
    line_index: int,
) -> Optional[int]:
    """
    Row index of content line `line_index` in segment `segment_index`.

    Segment numbering follows resolve_segments (0 is the title/placeholder).
    Returns None when the position does not exist in this document.
    """

    headers = _header_positions(document, header_lines)
    # Emphasis documents drop rows before the first header; flat ones keep them in segment 0.
    current = 0 if document.mode is SegmentationMode.FLAT else -1
    position = 0
    for index in range(len(document.rows)):
        if index in headers:
            current += 1
            position = 0
            continue
        if current == segment_index and position == line_index:
            return index
        position += 1
    return None


def remove_row(document: LanguageDocument, row_index: int, header_lines: AbstractSet[int]) -> Set[int]:
    """
    Delete one row in place and re-segment; returns the shifted flat header toggles.
    """

    del document.rows[row_index]
    if document.mode is SegmentationMode.EMPHASIS_DRIVEN:
        document.segments = segment_emphasized(document.rows)
    return {index - 1 if index > row_index else index for index in header_lines if index != row_index}


def resolve_segments(
    document: LanguageDocument,
    header_lines: AbstractSet[int] = frozenset(),
    game_name: str = "",
) -> List[Segment]:
    """Segments to build from, dispatching on the mode stored at load time."""

    if document.mode is SegmentationMode.FLAT:
        return segment_flat(document.lines, header_lines, game_name)
    return list(document.segments)
