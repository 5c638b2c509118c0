"""
Project lock — one install/uninstall sequence per project at a time.

Uses atomic file creation (``O_CREAT | O_EXCL``) on .box/.lock.  The
lock file holds the owner's pid; a lock left behind by a process that
no longer exists is reclaimed.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from boxtools.core.errors import LockError
from boxtools.core.services.tool_install.data.constants import IS_WINDOWS, LOCK_FILE

logger = logging.getLogger(__name__)


def lock_path(root: Path) -> Path:
    return root / LOCK_FILE


@contextmanager
def project_lock(root: Path, operation: str = "") -> Iterator[Path]:
    """Hold the project lock for the duration of the block.

    Raises:
        LockError: If another live process holds the lock.
    """
    path = lock_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not _try_acquire(path, operation):
        holder = _read_lock(path)
        pid = holder.get("pid")
        if isinstance(pid, int) and not _pid_alive(pid):
            logger.warning("Reclaiming stale lock %s (pid %s is gone)", path, pid)
            path.unlink(missing_ok=True)
            if not _try_acquire(path, operation):
                raise LockError(f"could not acquire {path}")
        else:
            raise LockError(
                f"another box process (pid {pid or 'unknown'}) is working on this project; "
                f"remove {path} if that is not the case"
            )

    logger.debug("Lock acquired: %s", path)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Lock released: %s", path)


def _try_acquire(path: Path, operation: str) -> bool:
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False

    metadata = {
        "pid": os.getpid(),
        "operation": operation,
        "acquired_at": datetime.now(UTC).isoformat(),
    }
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        json.dump(metadata, fh)
    return True


def _read_lock(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _pid_alive(pid: int) -> bool:
    if IS_WINDOWS:
        # os.kill would terminate the process there
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True
