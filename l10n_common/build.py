from __future__ import annotations

from typing import Any, Dict, List, Sequence

import polars as pl

from .mapping import MappingStore
from .schema import KeyRegistry, Segment


def empty_document(registry: KeyRegistry, game_name: str) -> Dict[str, Any]:
    """Output skeleton: the game header followed by every registry key in order."""

    output: Dict[str, Any] = {"header": game_name}
    for key in registry:
        output[key] = [] if registry.is_accumulation(key) else {"header": "", "content": ""}
    return output


def build_document(
    segments: Sequence[Segment],
    mapping: MappingStore,
    registry: KeyRegistry,
    game_name: str,
) -> Dict[str, Any]:
    """
    Build one language's output document.

    Segment 0 is the title segment and never mapped. Singleton keys keep the
    last segment mapped onto them; the accumulation key collects every mapped
    segment in document order. Mappings to keys no longer in the registry are
    ignored, so the output keys are always {"header"} plus the registry.
    """

    output = empty_document(registry, game_name)
    for segment in segments[1:]:
        key = mapping.resolve(segment.header, registry)
        if key is None:
            continue
        if registry.is_accumulation(key):
            output[key].append(segment.to_dict())
        else:
            output[key] = segment.to_dict()
    return output


def segments_frame(segments: Sequence[Segment], mapping: MappingStore, registry: KeyRegistry) -> pl.DataFrame:
    """Tabular view of the mapping-eligible segments (index, header, lines, key)."""

    rows: List[Dict[str, Any]] = []
    for index, segment in enumerate(segments[1:]):
        rows.append(
            {
                "index": index,
                "header": segment.header,
                "lines": len(segment.lines),
                "key": mapping.resolve(segment.header, registry) or "",
            }
        )
    schema = {"index": pl.Int64, "header": pl.Utf8, "lines": pl.Int64, "key": pl.Utf8}
    if not rows:
        return pl.DataFrame(schema=schema)
    return pl.DataFrame(rows, schema=schema)
