from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from routelens.matching.candidates import generate_candidates, with_suffix
from routelens.matching.similarity import similarity

logger = logging.getLogger(__name__)

FUZZY_THRESHOLD = 0.6

MatchStrategy = Literal["exact", "fuzzy", "first"]


@dataclass(frozen=True)
class NameMatch:
    name: str
    strategy: MatchStrategy
    score: float = 1.0


def exact_match(candidates: Sequence[str], identifiers: Sequence[str]) -> Optional[str]:
    # candidate order decides, not file order
    lowered = [(ident.lower(), ident) for ident in identifiers]
    for candidate in candidates:
        c = candidate.lower()
        for low, ident in lowered:
            if low == c:
                return ident
    return None


def fuzzy_match(
    candidates: Sequence[str],
    identifiers: Sequence[str],
    threshold: float = FUZZY_THRESHOLD,
) -> Optional[tuple[str, float]]:
    """
    Globally best (candidate, identifier) pair scoring strictly above threshold.

    Ties keep the earliest candidate, then the earliest identifier.
    """
    best: Optional[str] = None
    best_score = threshold
    for candidate in candidates:
        c = candidate.lower()
        for ident in identifiers:
            score = similarity(c, ident.lower())
            if score > best_score:
                best, best_score = ident, score
    if best is None:
        return None
    return best, best_score


def resolve_name(
    path: str,
    method: str,
    identifiers: Sequence[str],
    suffix: str = "",
) -> Optional[NameMatch]:
    """
    Pick the identifier most likely to serve (method, path).

    Exact (case-insensitive) match first, then fuzzy match, then the first
    identifier of the file. None only when there are no identifiers.
    """
    if not identifiers:
        return None

    candidates = with_suffix(generate_candidates(path, method), suffix)

    found = exact_match(candidates, identifiers)
    if found is not None:
        return NameMatch(found, "exact")

    fuzzy = fuzzy_match(candidates, identifiers)
    if fuzzy is not None:
        return NameMatch(fuzzy[0], "fuzzy", fuzzy[1])

    # weak fallback: may misattribute on files with several handlers
    logger.debug("no name match for %s %s, falling back to %s", method, path, identifiers[0])
    return NameMatch(identifiers[0], "first", 0.0)
