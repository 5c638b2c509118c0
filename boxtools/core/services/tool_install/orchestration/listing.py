"""
L5 Orchestration — Installed-tool listing.

Joins box.yml (what should be installed) with the manifest (what is).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

from boxtools.core.models.tool import BoxConfig
from boxtools.core.persistence.manifest_store import load_manifest
from boxtools.core.services.tool_install.data.constants import BIN_DIR


@dataclass
class ToolListing:
    identity: str
    type: str
    version: str = ""
    installed: bool = False
    binaries: list[str] = field(default_factory=list)
    orphan: bool = False   # in the manifest, no longer in box.yml

    def to_dict(self) -> dict:
        return asdict(self)


def list_tools(root: Path, config: BoxConfig) -> list[ToolListing]:
    """Configured tools in declaration order, then manifest orphans."""
    manifest = load_manifest(root)
    prefix = f"{BIN_DIR}/"
    listings: list[ToolListing] = []
    seen: set[str] = set()

    for tool in config.tools:
        identity = tool.display_name
        seen.add(identity)
        record = manifest.get(identity)
        listings.append(ToolListing(
            identity=identity,
            type=tool.type,
            version=tool.version,
            installed=record is not None,
            binaries=record.binaries(prefix) if record else [],
        ))

    for identity, record in sorted(manifest.tools.items()):
        if identity in seen:
            continue
        listings.append(ToolListing(
            identity=identity,
            type=record.type,
            version=record.version,
            installed=True,
            binaries=record.binaries(prefix),
            orphan=True,
        ))

    return listings
