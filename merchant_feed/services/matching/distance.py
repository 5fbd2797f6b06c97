"""Edit distance used as the fuzzy fallback signal."""
from typing import Optional

from rapidfuzz.distance import Levenshtein


def distance(a: str, b: str, score_cutoff: Optional[int] = None) -> int:
    """Levenshtein distance between ``a`` and ``b``.

    Unit cost for insertions, deletions and substitutions. When
    ``score_cutoff`` is given, the computation stops early and returns
    ``score_cutoff + 1`` for pairs further apart than the cutoff.
    """
    return Levenshtein.distance(a or "", b or "", score_cutoff=score_cutoff)
