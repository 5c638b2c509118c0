"""
L3 Detection — Filesystem state snapshots of the managed subtree.

A snapshot is the set of every file and directory under .box,
expressed as root-relative POSIX paths.  Two snapshots taken around
an installer run tell us what the installer created.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from boxtools.core.services.tool_install.data.constants import (
    BOX_DIR,
    LOCK_FILE,
    MANIFEST_FILE,
    MANIFEST_TMP_PREFIX,
)

logger = logging.getLogger(__name__)

# Box's own bookkeeping files never belong to a tool
_EXCLUDED = frozenset({MANIFEST_FILE, LOCK_FILE})


def capture_state(root: Path) -> set[str]:
    """Enumerate every path under ``<root>/.box``.

    Symlinked directories are recorded but never descended into, so a
    link pointing outside the project cannot make box claim external
    files.  Any I/O error aborts the walk — a partial snapshot would
    produce a wrong diff.

    Returns:
        Set of root-relative paths (empty if .box does not exist).

    Raises:
        OSError: If the subtree cannot be walked completely.
    """
    box_dir = root / BOX_DIR
    if not box_dir.is_dir():
        return set()

    state: set[str] = set()

    def _raise(err: OSError) -> None:
        raise err

    for dirpath, dirnames, filenames in os.walk(box_dir, onerror=_raise, followlinks=False):
        base = Path(dirpath)
        for name in (*dirnames, *filenames):
            rel = (base / name).relative_to(root).as_posix()
            if rel in _EXCLUDED:
                continue
            if base == box_dir and name.startswith(MANIFEST_TMP_PREFIX):
                continue
            state.add(rel)

    logger.debug("Captured %d path(s) under %s", len(state), box_dir)
    return state
