"""
Generated file model — returned by the direnv and Dockerfile generators.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class GeneratedFile(BaseModel):
    """A file produced by ``box generate``.

    Attributes:
        path:      Relative path from project root.
        content:   Full file content.
        overwrite: Whether to overwrite if already exists.
        reason:    Why this file was generated.
    """

    path: str
    content: str
    overwrite: bool = True
    reason: str = ""

    def write(self, root: Path) -> Path:
        """Write the file under ``root``; returns the absolute path.

        Raises:
            FileExistsError: If the file exists and ``overwrite`` is False.
        """
        target = root / self.path
        if target.exists() and not self.overwrite:
            raise FileExistsError(f"{self.path} already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.content, encoding="utf-8")
        return target
