"""Set-union merge for paginated collections."""

import hashlib
import json
from typing import Any, Iterable, List, Set


def element_key(element: Any) -> str:
    """
    Compute a stable key for an element so equal values collapse.

    Dicts are serialised with sorted keys, so ``{"a": 1, "b": 2}`` and
    ``{"b": 2, "a": 1}`` share a key. Tuples and lists serialise alike, so
    ``(1, 2)`` and ``[1, 2]`` count as the same element.

    Elements JSON cannot canonicalise (dicts with mixed key types, e.g.
    ``{1: "a", "b": 2}``) fall back to ``repr``; for those, dict key order
    is part of the key.

    Returns:
        SHA256 hash of the canonical form as hex string
    """
    try:
        canonical = json.dumps(element, sort_keys=True, separators=(",", ":"), default=str)
    except TypeError:
        canonical = f"repr:{element!r}"
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def union(existing: Iterable[Any] | None, incoming: Iterable[Any] | None) -> List[Any]:
    """
    Merge two sequences, keeping every distinct element exactly once.

    Order is first-seen-wins: prior elements first, then the new ones that
    were not already present. Duplicates inside either input collapse too.

    Example:
        >>> union(["a", "b", "c"], ["c", "d"])
        ['a', 'b', 'c', 'd']
    """
    seen: Set[str] = set()
    merged: List[Any] = []
    for element in [*(existing or []), *(incoming or [])]:
        key = element_key(element)
        if key in seen:
            continue
        seen.add(key)
        merged.append(element)
    return merged
