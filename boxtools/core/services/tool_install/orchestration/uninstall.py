"""
L5 Orchestration — Uninstall coordinator.

Deletes exactly what the manifest says a tool owns, deepest paths
first, and never anything outside the project root.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from boxtools.core.errors import UnsafePathError
from boxtools.core.models.manifest import Manifest
from boxtools.core.persistence.lock import project_lock
from boxtools.core.persistence.manifest_store import load_manifest, remove_tool, save_manifest
from boxtools.core.services.tool_install.data.constants import BIN_DIR, BOX_DIR, EXE_SUFFIX
from boxtools.core.services.tool_install.data.recipes import LEGACY_DATA_DIRS, RESERVED_NAMES
from boxtools.core.services.tool_install.domain.path_safety import (
    is_safe_relpath,
    resolve_inside_root,
)

logger = logging.getLogger(__name__)


@dataclass
class UninstallReport:
    """What an uninstall did, path by path (root-relative)."""

    identity: str
    recorded: bool = True              # False: no manifest entry, heuristic cleanup
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)      # non-empty dirs, failed removals
    skipped: list[str] = field(default_factory=list)   # unsafe paths


def uninstall_tool(root: Path, identity: str) -> UninstallReport:
    """Remove a tool's files and its manifest entry.

    Raises:
        LockError: If another box process holds the project lock.
        ManifestIOError: If the updated manifest cannot be written.
    """
    with project_lock(root, operation=f"uninstall {identity}"):
        manifest = load_manifest(root)
        record = manifest.get(identity)

        if record is None:
            logger.info("%s is not in the manifest; removing by convention", identity)
            return _uninstall_best_effort(root, identity, manifest)

        report = UninstallReport(identity=identity)
        for rel in sorted(record.files, reverse=True):
            _remove_path(root, rel, report)

        remove_tool(manifest, identity)
        save_manifest(manifest, root)

    logger.info(
        "Uninstalled %s: %d removed, %d kept, %d skipped",
        identity, len(report.removed), len(report.kept), len(report.skipped),
    )
    return report


def _remove_path(root: Path, rel: str, report: UninstallReport) -> None:
    try:
        full = resolve_inside_root(root, rel)
    except UnsafePathError:
        logger.warning("Security warning: skipping deletion of unsafe path %s", rel)
        report.skipped.append(rel)
        return

    if not os.path.lexists(full):
        return

    try:
        if full.is_dir() and not full.is_symlink():
            if any(full.iterdir()):
                logger.debug("Keeping non-empty directory %s", rel)
                report.kept.append(rel)
                return
            logger.info("Removing empty directory %s", rel)
            full.rmdir()
        else:
            logger.info("Removing file %s", rel)
            full.unlink()
    except OSError as e:
        logger.warning("Could not remove %s: %s", rel, e)
        report.kept.append(rel)
        return

    report.removed.append(rel)


def _is_owned(rel: str, manifest: Manifest) -> bool:
    """Whether ``rel`` is, or contains, a path recorded for any tool."""
    prefix = rel + "/"
    return any(
        f == rel or f.startswith(prefix)
        for record in manifest.tools.values()
        for f in record.files
    )


def _uninstall_best_effort(root: Path, identity: str, manifest: Manifest) -> UninstallReport:
    """Cleanup for tools installed before ownership was tracked.

    Only ``.box/bin/<name>`` and the legacy per-tool data directories are
    candidates, and none of them may overlap a recorded path.
    """
    report = UninstallReport(identity=identity, recorded=False)
    if (
        not is_safe_relpath(identity)
        or "/" in identity
        or "\\" in identity
        or identity in RESERVED_NAMES
    ):
        logger.warning("Not a plain tool name, nothing removed: %s", identity)
        return report

    for name in (identity, identity + EXE_SUFFIX):
        rel = f"{BIN_DIR}/{name}"
        if _is_owned(rel, manifest):
            logger.warning("%s belongs to another tool, not removed", rel)
            report.skipped.append(rel)
            continue
        _remove_path(root, rel, report)

    for pattern in LEGACY_DATA_DIRS.values():
        rel = f"{BOX_DIR}/{pattern.format(name=identity)}"
        if _is_owned(rel, manifest):
            logger.warning("%s holds files of another tool, not removed", rel)
            report.skipped.append(rel)
            continue
        try:
            full = resolve_inside_root(root, rel)
        except UnsafePathError:
            report.skipped.append(rel)
            continue
        if full.is_dir() and not full.is_symlink():
            logger.info("Removing data directory %s", rel)
            shutil.rmtree(full)
            report.removed.append(rel)

    return report
