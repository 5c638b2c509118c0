"""
Manifest persistence — atomic read/write for the tool ownership manifest.

The manifest is stored as JSON in .box/manifest.json.  Writes are
atomic (write to temp file, then rename) so a crash mid-write leaves
either the old manifest or the new one, never a truncated file.

The store is loaded fresh, mutated in memory and rewritten in full on
every update.  It is not guarded against concurrent writers on its
own; the orchestrators hold ``boxtools.core.persistence.lock`` around
install/uninstall sequences.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from boxtools.core.errors import ManifestIOError, UnsafePathError
from boxtools.core.models.manifest import Manifest, ToolRecord, _now_iso
from boxtools.core.models.tool import Tool
from boxtools.core.services.tool_install.data.constants import (
    MANIFEST_FILE,
    MANIFEST_TMP_PREFIX,
)
from boxtools.core.services.tool_install.domain.ownership import merge_files
from boxtools.core.services.tool_install.domain.path_safety import is_safe_relpath

logger = logging.getLogger(__name__)


def manifest_path(root: Path) -> Path:
    """Get the manifest file path for a project."""
    return root / MANIFEST_FILE


def load_manifest(root: Path) -> Manifest:
    """Load the manifest for a project.

    Returns:
        Manifest model. A missing file yields an empty manifest; so does
        a corrupt one (logged as a warning) — read failures never abort.
    """
    path = manifest_path(root)
    if not path.is_file():
        logger.debug("No manifest at %s — starting empty", path)
        return Manifest()

    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        manifest = Manifest.model_validate(data)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt manifest %s: %s — treating as empty", path, e)
        return Manifest()
    except ValidationError as e:
        logger.warning("Invalid manifest %s: %s — treating as empty", path, e)
        return Manifest()
    except OSError as e:
        logger.warning("Cannot read manifest %s: %s — treating as empty", path, e)
        return Manifest()

    logger.debug("Loaded manifest from %s (%d tools)", path, len(manifest.tools))
    return manifest


def update_manifest(manifest: Manifest, tool: Tool, files: Iterable[str]) -> ToolRecord:
    """Record ``files`` as owned by ``tool``.

    An existing record is merged by set union (the file set never
    shrinks), ``updated`` is refreshed and ``installed`` preserved.
    Otherwise a new record is created with both timestamps set to now.

    Raises:
        UnsafePathError: If any path is absolute or climbs out of the root.
    """
    files = list(files)
    for f in files:
        if not is_safe_relpath(f):
            raise UnsafePathError(f, operation=f"update manifest for {tool.display_name}")

    identity = tool.display_name
    now = _now_iso()
    existing = manifest.tools.get(identity)

    if existing is not None:
        installed = existing.installed
        merged = merge_files(existing.files, files)
    else:
        installed = now
        merged = sorted(set(files))

    record = ToolRecord(
        type=tool.type,
        source=tool.source_text,
        version=tool.version,
        files=merged,
        installed=installed,
        updated=now,
    )
    manifest.tools[identity] = record
    logger.debug("Manifest entry %r now owns %d file(s)", identity, len(merged))
    return record


def remove_tool(manifest: Manifest, identity: str) -> ToolRecord | None:
    """Drop a tool's record; returns it, or None if it was not present."""
    return manifest.tools.pop(identity, None)


def save_manifest(manifest: Manifest, root: Path) -> None:
    """Save the manifest (atomic write).

    Raises:
        ManifestIOError: If the manifest cannot be written.
    """
    path = manifest_path(root)
    data = manifest.model_dump(mode="json")
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=MANIFEST_TMP_PREFIX,
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to save manifest to %s: %s", path, e)
        raise ManifestIOError(f"cannot write manifest {path}: {e}") from e

    logger.debug("Manifest saved to %s", path)
