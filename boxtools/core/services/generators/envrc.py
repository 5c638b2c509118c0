"""
direnv generator — an .envrc that puts .box/bin on PATH.
"""

from __future__ import annotations

from pathlib import Path

from boxtools.core.models.template import GeneratedFile
from boxtools.core.models.tool import BoxConfig
from boxtools.core.services.tool_install.data.constants import (
    BIN_DIR,
    BOX_DIR,
    box_arch,
    box_os,
)


def shell_escape(value: str) -> str:
    """Single-quote ``value`` for POSIX sh (``'`` becomes ``'\\''``)."""
    return "'" + value.replace("'", "'\\''") + "'"


def render_envrc(project_root: Path, config: BoxConfig) -> str:
    box_dir = project_root / BOX_DIR
    bin_dir = project_root / BIN_DIR

    lines = [
        f"export BOX_DIR={shell_escape(str(box_dir))}",
        f"export BOX_BIN_DIR={shell_escape(str(bin_dir))}",
        f"export BOX_OS={shell_escape(box_os())}",
        f"export BOX_ARCH={shell_escape(box_arch())}",
        f"PATH_add {BIN_DIR}",
    ]
    for key in sorted(config.env):
        lines.append(f"export {key}={shell_escape(config.env[key])}")
    return "\n".join(lines) + "\n"


def generate_envrc(project_root: Path, config: BoxConfig) -> GeneratedFile:
    """Generate .envrc for ``project_root`` (always regenerated)."""
    return GeneratedFile(
        path=".envrc",
        content=render_envrc(project_root, config),
        overwrite=True,
        reason="direnv integration for .box/bin",
    )
