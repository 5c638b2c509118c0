"""
Manifest models — which files each installed tool owns.

Serialized to .box/manifest.json. The manifest is the single source
of truth for file ownership: uninstall only ever deletes what is
recorded here.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ToolRecord(BaseModel):
    """Ownership record for one tool identity."""

    type: str
    source: str
    version: str = ""
    files: list[str] = Field(default_factory=list)  # root-relative, sorted
    installed: str = Field(default_factory=_now_iso)
    updated: str = Field(default_factory=_now_iso)

    def binaries(self, bin_prefix: str = ".box/bin/") -> list[str]:
        """Base names of the files this tool published into the bin dir."""
        return [f[len(bin_prefix):] for f in self.files if f.startswith(bin_prefix)]


class Manifest(BaseModel):
    """Root manifest model — ``{"tools": {identity: ToolRecord}}``."""

    tools: dict[str, ToolRecord] = Field(default_factory=dict)

    def get(self, identity: str) -> ToolRecord | None:
        return self.tools.get(identity)
