"""
L3 Detection — Locate executables in an installer's private output tree.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from boxtools.core.errors import DiscoveryError
from boxtools.core.services.tool_install.data.constants import EXE_SUFFIX

logger = logging.getLogger(__name__)


def find_binary(search_dir: Path, name: str) -> Path:
    """Find the executable ``name`` anywhere below ``search_dir``.

    Package managers may nest binaries in OS/arch sub-folders, so the
    whole tree is searched for ``name`` or ``name.exe``.  When a stale
    copy from an older version is still around, the most recently
    modified match wins.

    Raises:
        DiscoveryError: If nothing matches (or the directory is missing).
    """
    candidates = {name, name + EXE_SUFFIX}
    newest: Path | None = None
    newest_mtime = 0.0

    def _raise(err: OSError) -> None:
        raise err

    if search_dir.is_dir():
        for dirpath, _dirnames, filenames in os.walk(search_dir, onerror=_raise):
            for filename in filenames:
                if filename not in candidates:
                    continue
                path = Path(dirpath) / filename
                try:
                    mtime = path.stat().st_mtime
                except FileNotFoundError:
                    logger.debug("Skipping dangling link %s", path)
                    continue
                if newest is None or mtime > newest_mtime:
                    newest, newest_mtime = path, mtime

    if newest is None:
        raise DiscoveryError(name, search_dir)

    logger.debug("Found %s at %s", name, newest)
    return newest
