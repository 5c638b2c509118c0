"""
L1 Domain — Ownership inference from snapshots (pure).

Most package managers never say which files they wrote.  Box infers
it: whatever exists after the install that did not exist before
belongs to the tool, plus anything the installer reported explicitly.
No I/O, no subprocess.
"""

from __future__ import annotations

from collections.abc import Iterable


def diff_states(before: set[str], after: set[str]) -> set[str]:
    """Paths present after the install but not before."""
    return after - before


def owned_files(
    before: set[str],
    after: set[str],
    reported: Iterable[str] = (),
) -> list[str]:
    """``reported ∪ (after \\ before)``, deduplicated and sorted."""
    return sorted(set(reported) | diff_states(before, after))


def merge_files(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Union of two file lists, sorted. Never drops an existing entry."""
    return sorted(set(existing) | set(new))
