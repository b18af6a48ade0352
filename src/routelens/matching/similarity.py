from __future__ import annotations


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                cur.append(prev[j - 1])
            else:
                cur.append(min(prev[j - 1], cur[j - 1], prev[j]) + 1)
        prev = cur
    return prev[-1]


def similarity(a: str, b: str) -> float:
    """
    (maxLen - editDistance) / maxLen, in [0, 1].

    Symmetric; two empty strings are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest
