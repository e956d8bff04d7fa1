from __future__ import annotations

from typing import Container, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from rapidfuzz import fuzz, process, utils

from .schema import HeaderText


class MappingStore:
    """
    Header text -> registry key, shared by every loaded language.

    Entries are keyed by header text rather than by segment position, so a key
    assigned against the reference language is replayed for every language
    whose segment carries the same header.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: Dict[HeaderText, str] = {}
        for header, key in (entries or {}).items():
            self.set(header, key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, header: object) -> bool:
        return header in self._entries

    def __iter__(self) -> Iterator[HeaderText]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"MappingStore({self._entries!r})"

    def items(self) -> List[Tuple[HeaderText, str]]:
        return list(self._entries.items())

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def get(self, header: str) -> Optional[str]:
        return self._entries.get(HeaderText(header))

    def set(self, header: str, key: str) -> None:
        self._entries[HeaderText(header)] = key

    def unset(self, header: str) -> None:
        self._entries.pop(HeaderText(header), None)

    def resolve(self, header: str, registry: Container[str]) -> Optional[str]:
        """Return the mapped key, or None when unmapped or the key is no longer registered."""

        key = self._entries.get(HeaderText(header))
        if not key or key not in registry:
            return None
        return key

    def remove_key(self, key: str) -> List[HeaderText]:
        """Drop every entry pointing at `key`; returns the headers that were unmapped."""

        dropped = [header for header, value in self._entries.items() if value == key]
        for header in dropped:
            del self._entries[header]
        return dropped


def suggest_mapping(headers: Iterable[str], keys: Iterable[str], threshold: int = 60) -> Dict[str, str]:
    """
    Suggest a key for each header using fuzzy matching.

    Returns {header: suggested_key}; headers scoring below `threshold` get "".
    """

    choices = list(keys)
    suggestions: Dict[str, str] = {}
    for header in headers:
        if header in suggestions:
            continue
        match_result = None
        if choices:
            match_result = process.extractOne(
                header, choices, scorer=fuzz.WRatio, processor=utils.default_process
            )
        if match_result:
            match, score, _ = match_result
            suggestions[header] = match if score > threshold else ""
        else:
            suggestions[header] = ""
    return suggestions
