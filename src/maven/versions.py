"""Version tie-break used when two declarations share a group:artifact key.

This is a heuristic, not Maven's ComparableVersion: versions are split on
'.', a longer segment beats a shorter one (so 1.10 > 1.9), equal-length
segments compare as strings, and on a common prefix the version with more
segments wins.
"""
from __future__ import annotations


def is_newer(current: str, candidate: str) -> bool:
    """Return True when ``candidate`` should replace ``current``.

    Equal versions return False, so an already accepted artifact is never
    explored twice.
    """
    old_parts = current.split(".")
    new_parts = candidate.split(".")
    for old, new in zip(old_parts, new_parts):
        if len(old) != len(new):
            return len(new) > len(old)
        if old != new:
            return new > old
    return len(new_parts) > len(old_parts)
