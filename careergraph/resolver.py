"""
Canonical key resolution.

Responsibilities:
- Decide whether a freshly normalized key names an entity that is already
  stored under an exact, truncated or extended variant of that key.
- Rank competing candidates deterministically.

Non-Responsibilities:
- No normalization (callers pass already-normalized keys).
- No mutation of the entity maps.

Invariant:
Given the same set of existing keys and the same candidate, the result is
the same regardless of the order the keys are iterated in.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from rapidfuzz import fuzz

EXACT = "exact"
FUZZY = "fuzzy"
NONE = "none"


@dataclass
class KeyMatch:
    """Outcome of resolving one candidate key."""

    candidate: str
    key: Optional[str]
    kind: str
    candidates: List[str] = field(default_factory=list)

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1

    def __bool__(self) -> bool:
        return self.key is not None


def _contains_either(existing: str, candidate: str) -> bool:
    return candidate in existing or existing in candidate


def _rank(existing: str, candidate: str):
    # Closest spelling first, then closest length, then alphabetical.
    return (-fuzz.ratio(existing, candidate), abs(len(existing) - len(candidate)), existing)


def resolve_match(existing_keys: Iterable[str], candidate: str) -> KeyMatch:
    """
    Resolve a candidate key against the keys already in a map.

    An exact hit wins outright. Otherwise every existing key that contains
    the candidate, or is contained by it, qualifies; when several qualify
    the one with the highest similarity ratio is picked.

    Args:
        existing_keys: Keys currently stored (any iteration order)
        candidate: Normalized key to resolve

    Returns:
        KeyMatch; ``key`` is None when nothing matched or candidate is empty
    """
    if not candidate:
        return KeyMatch(candidate=candidate, key=None, kind=NONE)

    keys = [k for k in existing_keys if k]
    if candidate in keys:
        return KeyMatch(candidate=candidate, key=candidate, kind=EXACT, candidates=[candidate])

    qualifying = sorted(
        (k for k in keys if _contains_either(k, candidate)),
        key=lambda k: _rank(k, candidate),
    )
    if not qualifying:
        return KeyMatch(candidate=candidate, key=None, kind=NONE)
    return KeyMatch(candidate=candidate, key=qualifying[0], kind=FUZZY, candidates=qualifying)


def resolve(existing_keys: Iterable[str], candidate: str) -> Optional[str]:
    """Return the stored key the candidate refers to, or None."""
    return resolve_match(existing_keys, candidate).key
