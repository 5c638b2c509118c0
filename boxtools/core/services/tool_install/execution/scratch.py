"""
L4 Execution — Per-invocation scratch directory.

Install scripts and ``box run`` get a private TMPDIR that is removed
on every exit path, including errors and Ctrl+C.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


@contextmanager
def scratch_dir(prefix: str = "box-") -> Iterator[Path]:
    """Create a temporary directory and remove it with all its contents."""
    path = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug("Scratch dir created: %s", path)
    try:
        yield path
    finally:
        remove_tree(path)
        logger.debug("Scratch dir removed: %s", path)


def remove_tree(path: Path) -> None:
    """``rmtree`` that also clears read-only entries (go module caches)."""
    for dirpath, dirnames, _filenames in os.walk(path):
        for name in dirnames:
            _chmod_quiet(Path(dirpath) / name)
    _chmod_quiet(path)
    shutil.rmtree(path, ignore_errors=True)
    if path.exists():
        logger.warning("Could not fully remove %s", path)


def _chmod_quiet(path: Path) -> None:
    try:
        if not path.is_symlink():
            path.chmod(stat.S_IRWXU)
    except OSError as e:
        logger.debug("chmod %s failed: %s", path, e)
