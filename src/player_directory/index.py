"""
In-memory search index over the player directory.

The index keeps parallel arrays (normalized name, display metadata and the
folded surname/display strings used for ranking) plus a bucket map from
first character to positions. All writes go through SearchIndex.append so
the arrays can never drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .normalize import canonical_initial, normalize, surname_of
from .schemas import PlayerRecord, PlayerSuggestion


@dataclass
class Snapshot:
    """Serializable form of a completed index; buckets are rebuilt on load."""

    version: str
    names: List[str]
    meta: List[dict]


@dataclass
class SearchIndex:
    version: str
    names: List[str] = field(default_factory=list)
    meta: List[PlayerSuggestion] = field(default_factory=list)
    by_first_char: Dict[str, List[int]] = field(default_factory=dict)
    surnames: List[str] = field(default_factory=list)
    displays: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.names)

    def append(self, record: PlayerRecord) -> bool:
        """
        Adds one record. Returns False (and changes nothing) when the
        record has no usable name.
        """
        name = canonical_initial(normalize(record.name_lower))
        if not name:
            return False

        meta = record.suggestion()
        surname = normalize(record.surname_lower) or surname_of(name)
        display = canonical_initial(normalize(record.short_name))

        position = len(self.names)
        self.names.append(name)
        self.meta.append(meta)
        self.surnames.append(surname)
        self.displays.append(display)
        self.by_first_char.setdefault(name[0], []).append(position)
        return True

    def extend(self, records: Iterable[PlayerRecord]) -> int:
        """Appends a batch of records, returning how many were indexed."""
        added = 0
        for record in records:
            if self.append(record):
                added += 1
        return added

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            version=self.version,
            names=list(self.names),
            meta=[item.model_dump(by_alias=True) for item in self.meta],
        )


def build_index(records: Iterable[PlayerRecord], version: str) -> SearchIndex:
    """Builds a complete index for one dataset version in a single pass."""
    index = SearchIndex(version=version)
    index.extend(records)
    return index


def records_from_snapshot(snapshot: Snapshot) -> List[PlayerRecord]:
    """
    Turns a stored snapshot back into directory records so it can be fed
    through the same incremental build as any other tier.
    """
    records = []
    for name, item in zip(snapshot.names, snapshot.meta):
        record = PlayerRecord.model_validate(item)
        if not record.name_lower:
            record = record.model_copy(update={"name_lower": name})
        records.append(record)
    return records


def check_invariants(index: SearchIndex) -> Optional[str]:
    """Returns a description of the first broken invariant, or None."""
    size = len(index.names)
    if not (len(index.meta) == len(index.surnames) == len(index.displays) == size):
        return "parallel arrays differ in length"
    for char, positions in index.by_first_char.items():
        for position in positions:
            if position >= size or not index.names[position].startswith(char):
                return f"bucket '{char}' holds invalid position {position}"
    return None
