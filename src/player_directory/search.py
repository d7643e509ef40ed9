"""
Ranked lookup over a SearchIndex, run synchronously on every keystroke.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .index import SearchIndex
from .normalize import canonical_initial, normalize
from .schemas import PlayerSuggestion

MIN_QUERY_LENGTH = 3
# Stop collecting after this many candidates to bound per-keystroke work
MAX_CANDIDATES = 400

RANK_SURNAME_PREFIX = 0
RANK_NAME_PREFIX = 1
RANK_DISPLAY_PREFIX = 2
RANK_WORD_BOUNDARY = 3
RANK_SUBSTRING = 4

_INITIAL_QUERY = re.compile(r"^[a-z]\.")
_TOKEN_PUNCTUATION = "-'."


@dataclass(frozen=True)
class RankedResult:
    rank: int
    player: PlayerSuggestion


def _word_boundary(haystack: str, needle: str) -> bool:
    return bool(needle) and (" " + needle) in haystack


def _punctuated_substring(haystack: str, needle: str) -> bool:
    """
    Substring match for the fallback tier: the query must span several
    tokens, or start right after punctuation inside a token
    ("chamberlain" in "a. oxlade-chamberlain", "reilly" in "o'reilly").
    """
    start = haystack.find(needle)
    while start != -1:
        if start > 0 and (" " in needle or haystack[start - 1] in _TOKEN_PUNCTUATION):
            return True
        start = haystack.find(needle, start + 1)
    return False


def _rank(query: str, surname_query: str, name: str, surname: str, display: str) -> int | None:
    if surname_query and surname.startswith(surname_query):
        return RANK_SURNAME_PREFIX
    if name.startswith(query):
        return RANK_NAME_PREFIX
    if display.startswith(query):
        return RANK_DISPLAY_PREFIX
    if _word_boundary(name, surname_query) or _word_boundary(name, query):
        return RANK_WORD_BOUNDARY
    if _punctuated_substring(name, query):
        return RANK_SUBSTRING
    return None


def search(query: str, index: SearchIndex | None, limit: int) -> List[RankedResult]:
    """
    Returns up to `limit` suggestions for `query`, best first.

    Queries shorter than three characters are rejected unless they have
    the initial shape ("j."). Initial-style queries only scan the bucket
    for their first letter; other queries scan every indexed name. Safe
    to call on an index that is still being built.
    """
    if index is None or limit is None or limit <= 0:
        return []

    q = canonical_initial(normalize(query))
    is_initial = bool(_INITIAL_QUERY.match(q))
    if not q or (not is_initial and len(q) < MIN_QUERY_LENGTH):
        return []

    # Surname queries drop the "j. " prefix so "j. bell" also ranks on "bell"
    surname_query = q[2:].strip() if is_initial else q

    names = index.names
    # Bound the scan to what is indexed right now
    size = min(len(names), len(index.meta), len(index.surnames), len(index.displays))
    if is_initial:
        positions = [p for p in index.by_first_char.get(q[0], ()) if p < size]
    else:
        positions = range(size)

    candidates = []
    for position in positions:
        name = names[position]
        if is_initial:
            if not name.startswith(q):
                continue
            rank = RANK_SURNAME_PREFIX if surname_query and index.surnames[position].startswith(surname_query) else RANK_NAME_PREFIX
        else:
            rank = _rank(q, surname_query, name, index.surnames[position], index.displays[position])
            if rank is None:
                continue
        candidates.append((rank, index.displays[position], index.meta[position].short_name, position))
        if len(candidates) >= MAX_CANDIDATES:
            break

    candidates.sort()
    return [RankedResult(rank=rank, player=index.meta[position]) for rank, _, _, position in candidates[:limit]]
