"""
L1 Domain — Root-containment checks for manifest paths.

Manifest entries are supposed to be root-relative, but the manifest
is a plain JSON file anyone can edit.  Before box deletes anything it
re-checks that the path cannot land outside the project.
"""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePosixPath, PureWindowsPath

from boxtools.core.errors import UnsafePathError

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def is_safe_relpath(rel: str) -> bool:
    """Whether ``rel`` is a clean root-relative path.

    Rejects empty paths, absolute paths (POSIX or Windows), drive
    designators (``C:foo``) and any ``..`` segment.
    """
    if not rel or "\x00" in rel:
        return False
    if rel.startswith(("/", "\\")) or _DRIVE_RE.match(rel):
        return False
    if PurePosixPath(rel).is_absolute() or PureWindowsPath(rel).is_absolute():
        return False
    parts = re.split(r"[\\/]", rel)
    return ".." not in parts


def to_relpath(root: Path, path: Path) -> str:
    """Root-relative POSIX path for a path inside ``root``."""
    return Path(os.path.relpath(path, root)).as_posix()


def resolve_inside_root(root: Path, rel: str) -> Path:
    """Join ``rel`` onto ``root`` and verify the result stays inside.

    The final path component is NOT dereferenced — a symlink recorded
    in the manifest is removed as a link, never followed — but every
    parent directory is resolved so a symlinked directory pointing
    outside the project is caught.

    Raises:
        UnsafePathError: If the path escapes the root.
    """
    if not is_safe_relpath(rel):
        raise UnsafePathError(rel)

    root_resolved = root.resolve()
    candidate = root / rel
    parent = candidate.parent.resolve()
    full = parent / candidate.name

    if parent != root_resolved and root_resolved not in parent.parents:
        raise UnsafePathError(rel)
    if full == root_resolved:
        raise UnsafePathError(rel)
    return full
