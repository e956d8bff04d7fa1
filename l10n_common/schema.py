from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Iterator, List, NewType, Sequence

from .errors import ProtectedKeyError

if TYPE_CHECKING:
    from .mapping import MappingStore

# Header text is the cross-language join key: segments from different languages
# resolve to the same mapping entry when their header strings are equal.
HeaderText = NewType("HeaderText", str)

DEFAULT_KEYS: Sequence[str] = ("game", "rtp", "description", "wins", "wild", "scatter", "features")
DEFAULT_ACCUMULATION_KEY = "features"
# Top-level field of every output document; never usable as a key.
RESERVED_KEY = "header"


@dataclass(frozen=True)
class Row:
    """One first-column cell of a worksheet."""

    text: str
    emphasized: bool = False


@dataclass(frozen=True)
class Segment:
    header: str
    content: str = ""

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n") if self.content else []

    def to_dict(self) -> dict:
        return {"header": self.header, "content": self.content}


class SegmentationMode(str, Enum):
    """How a document's segment boundaries were chosen at load time."""

    EMPHASIS_DRIVEN = "emphasis"
    FLAT = "flat"


@dataclass
class LanguageDocument:
    """
    Parsed source for one language.

    `rows` keeps every non-empty row in document order; flat documents are
    segmented from it on demand using the session's header toggles.
    `segments` holds the emphasis-driven result, segment 0 being the title.
    """

    language: str
    mode: SegmentationMode
    rows: List[Row] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    @property
    def lines(self) -> List[str]:
        return [row.text for row in self.rows]

    @property
    def title(self) -> str:
        if self.mode is SegmentationMode.EMPHASIS_DRIVEN and self.segments:
            return self.segments[0].header
        return ""


class KeyRegistry:
    """
    Ordered set of output keys.

    The accumulation key is identified purely by name, so removing and
    re-adding it restores list semantics.
    """

    def __init__(
        self,
        keys: Iterable[str] | None = None,
        *,
        defaults: Sequence[str] = DEFAULT_KEYS,
        accumulation_key: str = DEFAULT_ACCUMULATION_KEY,
        essential: Iterable[str] = (),
    ) -> None:
        self.defaults: List[str] = list(defaults)
        self.accumulation_key = accumulation_key
        self.essential = frozenset(essential)
        self._keys: List[str] = []
        for key in self.defaults if keys is None else keys:
            self.add(key)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, name: object) -> bool:
        return name in self._keys

    def __repr__(self) -> str:
        return f"KeyRegistry({self._keys!r})"

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    def is_accumulation(self, name: str) -> bool:
        return name == self.accumulation_key

    def is_essential(self, name: str) -> bool:
        return name in self.essential

    def add(self, name: str) -> bool:
        """
        Append a trimmed, non-empty, unseen key name. Returns True when added.

        Duplicates (the DuplicateKeyError case) and the reserved "header" name
        are rejected silently by returning False.
        """

        trimmed = (name or "").strip()
        if not trimmed or trimmed == RESERVED_KEY or trimmed in self._keys:
            return False
        self._keys.append(trimmed)
        return True

    def remove(self, name: str, mapping: "MappingStore | None" = None) -> bool:
        """
        Remove a key and every mapping entry that points at it.

        The caller is responsible for confirming the removal with the user.
        Essential keys raise ProtectedKeyError and leave everything untouched.
        """

        if self.is_essential(name):
            raise ProtectedKeyError(name)
        if name not in self._keys:
            return False
        self._keys.remove(name)
        if mapping is not None:
            mapping.remove_key(name)
        return True

    def reorder(self, from_index: int, to_index: int) -> None:
        size = len(self._keys)
        if from_index == to_index:
            return
        if not (0 <= from_index < size and 0 <= to_index < size):
            return
        moved = self._keys.pop(from_index)
        self._keys.insert(to_index, moved)

    def restore_defaults(self) -> None:
        """Reset to the default key list. Mappings are left alone."""

        self._keys = list(dict.fromkeys(self.defaults))

    def replace(self, keys: Iterable[str]) -> None:
        """Replace the whole sequence, dropping blanks and repeats."""

        self._keys = []
        for key in keys:
            self.add(key)
