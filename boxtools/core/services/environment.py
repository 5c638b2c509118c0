"""
Project environment — what ``box run`` and ``box env`` hand to tools.

    current environment
      + PATH prefixed with .box/bin
      + BOX_DIR, BOX_BIN_DIR
      + box.yml ``env``          (last wins)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from boxtools.core.models.tool import BoxConfig
from boxtools.core.services.tool_install.data.constants import BIN_DIR, BOX_DIR

logger = logging.getLogger(__name__)


def build_environment(
    project_root: Path,
    config: BoxConfig,
    *,
    base: Mapping[str, str] | None = None,
    scratch_dir: Path | None = None,
) -> dict[str, str]:
    """Merge the process environment with box's project variables.

    Args:
        project_root: Absolute project root.
        config: Loaded box.yml (its ``env`` is applied last).
        base: Starting environment (default: ``os.environ``).
        scratch_dir: When set, TMPDIR/TEMP/TMP point at it.
    """
    env = dict(os.environ if base is None else base)
    box_dir = project_root / BOX_DIR
    bin_dir = project_root / BIN_DIR

    current_path = env.get("PATH")
    env["PATH"] = f"{bin_dir}{os.pathsep}{current_path}" if current_path else str(bin_dir)
    env["BOX_DIR"] = str(box_dir)
    env["BOX_BIN_DIR"] = str(bin_dir)

    if scratch_dir is not None:
        for key in ("TMPDIR", "TEMP", "TMP"):
            env[key] = str(scratch_dir)

    env.update(config.env)
    logger.debug("Environment built with %d box.yml override(s)", len(config.env))
    return env
