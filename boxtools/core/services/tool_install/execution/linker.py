"""
L4 Execution — Publish installed binaries into the shared .box/bin.

Each package manager installs into its own private tree (.box/go,
.box/npm, ...).  The linker exposes the requested executables in
.box/bin, preferring relative symlinks so a checked-out .box keeps
working when the project directory moves.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from boxtools.core.errors import InstallerExecutionError
from boxtools.core.services.tool_install.data.constants import EXE_SUFFIX, IS_WINDOWS
from boxtools.core.services.tool_install.detection.binaries import find_binary
from boxtools.core.services.tool_install.domain.path_safety import to_relpath

logger = logging.getLogger(__name__)


def link_binaries(
    root: Path,
    src_dir: Path,
    dest_dir: Path,
    names: list[str],
    *,
    windows: bool = IS_WINDOWS,
) -> list[str]:
    """Publish ``names`` from ``src_dir`` into ``dest_dir``.

    Returns:
        Root-relative paths of the published entries (for the manifest).

    Raises:
        DiscoveryError: If a binary is missing from ``src_dir``.
        InstallerExecutionError: If the copy fallback fails.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    published: list[str] = []

    for name in names:
        src = find_binary(src_dir, name)

        dest = dest_dir / name
        if windows and not dest.name.endswith(EXE_SUFFIX):
            dest = dest.with_name(dest.name + EXE_SUFFIX)

        _remove_existing(dest)

        rel_target = os.path.relpath(src, dest_dir)
        try:
            logger.info("Symlinking %s to %s", rel_target, dest)
            os.symlink(rel_target, dest)
        except OSError as e:
            logger.info("Symlink failed (%s), copying %s to %s", e, src, dest)
            try:
                shutil.copy2(src, dest)
            except OSError as copy_err:
                raise InstallerExecutionError(
                    f"failed to copy binary {src} to {dest}: {copy_err}"
                ) from copy_err

        published.append(to_relpath(root, dest))

    return published


def _remove_existing(dest: Path) -> None:
    if dest.is_symlink() or dest.is_file():
        dest.unlink()
    elif dest.is_dir():
        raise InstallerExecutionError(f"cannot publish binary: {dest} is a directory")
