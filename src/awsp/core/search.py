"""Approximate (typo-tolerant) search over the profile list.

Each field is matched by aligning the pattern against the text that follows
every offset. The cost is an optimal-string-alignment edit distance where the
text side may stop anywhere, so ``stging`` finds ``staging`` with one
insertion, ``prdo`` finds ``prod`` with one transposition and ``prod`` finds
``preprod`` at offset 3. Scores are ``edits / len(pattern)`` plus a small
penalty per character of offset, so hits at the start of a field rank first.
Single characters only match at the start of a word.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from awsp.core.profiles import Profile
from awsp.utils.constants import DEFAULT_FUZZY_THRESHOLD, MISSING_ACCOUNT_ID
from awsp.utils.debug import debug_search

# Score added per character between the field start and the match
POSITION_PENALTY = 0.01

# Shorter terms only match where a word begins
MIN_INNER_MATCH = 2

DEFAULT_KEYS: tuple[Callable[[Profile], str], ...] = (
    lambda p: p.name,
    lambda p: "" if p.account_id == MISSING_ACCOUNT_ID else p.account_id,
)


def prefix_distance(pattern: str, text: str, limit: Optional[int] = None) -> int:
    """Smallest OSA distance between pattern and any prefix of text.

    Args:
        pattern: Search term (already lowered)
        text: Field text (already lowered)
        limit: Stop early and return ``limit + 1`` once every alignment
            exceeds this many edits
    """
    m = len(pattern)
    if m == 0:
        return 0
    text = text[: m + (limit if limit is not None else m)]
    n = len(text)

    prev2: list[int] = []
    prev = list(range(n + 1))
    for i in range(1, m + 1):
        row = [i] + [0] * n
        pc = pattern[i - 1]
        for j in range(1, n + 1):
            tc = text[j - 1]
            cost = 0 if pc == tc else 1
            best = min(prev[j] + 1, row[j - 1] + 1, prev[j - 1] + cost)
            if (
                i > 1
                and j > 1
                and pc == text[j - 2]
                and pattern[i - 2] == tc
            ):
                best = min(best, prev2[j - 2] + 1)
            row[j] = best
        if limit is not None and min(row) > limit:
            return limit + 1
        prev2, prev = prev, row
    return min(prev)


def word_starts(text: str) -> tuple[int, ...]:
    """Offsets where a word begins: 0 and every position after a separator."""
    starts = [0]
    for i in range(1, len(text)):
        if not text[i - 1].isalnum() and text[i].isalnum():
            starts.append(i)
    return tuple(starts)


@dataclass(frozen=True)
class _IndexedField:
    text: str
    starts: tuple[int, ...]


class FuzzySearcher:
    """Pre-indexed fuzzy search over a fixed, ordered record set.

    Instances are read-only after construction; ``search`` may be called
    any number of times.
    """

    def __init__(
        self,
        records: Sequence[Profile],
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
        keys: Sequence[Callable[[Profile], str]] = DEFAULT_KEYS,
    ):
        self._records = tuple(records)
        self._threshold = threshold
        self._index: tuple[tuple[_IndexedField, ...], ...] = tuple(
            tuple(
                _IndexedField(text, word_starts(text))
                for text in (key(record).lower() for key in keys)
            )
            for record in self._records
        )

    @property
    def threshold(self) -> float:
        return self._threshold

    def get_all(self) -> list[Profile]:
        """All records in their original order."""
        return list(self._records)

    def score(self, term: str, position: int) -> Optional[float]:
        """Best score of the record at ``position`` against a lowered term.

        Returns:
            The lowest ``edits / len(term) + offset * POSITION_PENALTY`` over
            all fields and offsets, or None if no alignment is within the
            threshold
        """
        length = len(term)
        best: Optional[float] = None
        for field in self._index[position]:
            for offset in range(max(1, len(field.text))):
                penalty = offset * POSITION_PENALTY
                if penalty > self._threshold:
                    break
                if length < MIN_INNER_MATCH and offset not in field.starts:
                    continue
                max_edits = int((self._threshold - penalty) * length)
                edits = prefix_distance(term, field.text[offset:], max_edits)
                if edits > max_edits:
                    continue
                value = edits / length + penalty
                if best is None or value < best:
                    best = value
                if best == 0:
                    return best
        return best

    def search(self, term: str) -> list[Profile]:
        """Records matching term, best first, ties in original order."""
        if not term.strip():
            return self.get_all()
        term = term.lower()

        scored = []
        for position, record in enumerate(self._records):
            value = self.score(term, position)
            if value is not None:
                scored.append((value, record))
        # sort is stable, so equal scores keep their original order
        scored.sort(key=lambda item: item[0])
        debug_search("search", term=term, matches=len(scored))
        return [record for _, record in scored]
