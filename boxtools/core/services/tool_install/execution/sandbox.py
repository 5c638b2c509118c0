"""
L4 Execution — Sandbox applier for untrusted install commands.

Rewrites a command so that it runs under the platform's isolation
primitive.  This module never executes anything; it only returns the
(command, args) pair the runner should spawn instead.

Variants:

    darwin  deny-by-default   sandbox-exec with an SBPL profile that
                              denies every file write except the project
                              root, the scratch dir and the system temp dir
    linux   namespace         unshare into a new user+mount namespace with
                              the caller mapped to root.  This isolates
                              identity only; writes are NOT restricted to
                              the project (see DESIGN.md)
    other   none              command passes through unchanged
"""

from __future__ import annotations

import enum
import logging
import os
import sys
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Device files every shell tool expects to be able to write
_DEVICE_FILES = ("/dev/null", "/dev/zero", "/dev/stdout", "/dev/stderr", "/dev/tty")


class SandboxVariant(str, enum.Enum):
    DENY_BY_DEFAULT = "deny-by-default"
    NAMESPACE = "namespace"
    NONE = "none"


# Launcher binary for each variant (None: nothing to launch)
SANDBOX_LAUNCHERS: dict[SandboxVariant, str | None] = {
    SandboxVariant.DENY_BY_DEFAULT: "sandbox-exec",
    SandboxVariant.NAMESPACE: "unshare",
    SandboxVariant.NONE: None,
}


def sandbox_variant(platform: str | None = None) -> SandboxVariant:
    """Which sandbox variant applies on ``platform`` (default: this one)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return SandboxVariant.DENY_BY_DEFAULT
    if platform.startswith("linux"):
        return SandboxVariant.NAMESPACE
    return SandboxVariant.NONE


def apply_sandbox(
    command: str,
    args: list[str],
    root: Path | str,
    scratch_dir: Path | str | None = None,
    *,
    platform: str | None = None,
) -> tuple[str, list[str]]:
    """Wrap ``command args`` in the platform sandbox.

    Args:
        command: Executable to run.
        args: Its arguments.
        root: Absolute project root (writes allowed below it).
        scratch_dir: Per-invocation scratch dir; empty/None means the
            platform temp dir.
        platform: Override ``sys.platform`` (tests, doctor).

    Returns:
        The (command, args) pair to spawn instead.
    """
    variant = sandbox_variant(platform)

    if variant is SandboxVariant.DENY_BY_DEFAULT:
        profile = build_write_profile(root, scratch_dir)
        return "sandbox-exec", ["-p", profile, command, *args]

    if variant is SandboxVariant.NAMESPACE:
        return "unshare", ["--user", "--map-root-user", "--mount", "--", command, *args]

    return command, list(args)


def allowed_write_paths(root: Path | str, scratch_dir: Path | str | None = None) -> list[str]:
    """Directories a sandboxed command may write to.

    Each directory is listed as given and in its symlink-resolved form
    (macOS reaches /var through /private/var), deduplicated in order.
    """
    scratch = str(scratch_dir) if scratch_dir else tempfile.gettempdir()
    system_temp = tempfile.gettempdir()

    paths: list[str] = []
    for raw in (str(root), scratch, system_temp):
        for candidate in (raw, _resolve(raw)):
            if candidate not in paths:
                paths.append(candidate)
    return paths


def build_write_profile(root: Path | str, scratch_dir: Path | str | None = None) -> str:
    """SBPL profile: allow everything, deny writes outside the allow-list."""
    lines = [
        "(version 1)",
        "(allow default)",
        "(deny file-write*)",
    ]
    for path in allowed_write_paths(root, scratch_dir):
        lines.append(f"(allow file-write* (subpath {_sbpl_string(path)}))")
    for device in _DEVICE_FILES:
        lines.append(f"(allow file-write* (literal {_sbpl_string(device)}))")
    return "\n".join(lines) + "\n"


def _resolve(path: str) -> str:
    try:
        return os.path.realpath(path, strict=True)
    except OSError:
        logger.debug("Cannot resolve %s — using it as given", path)
        return path


def _sbpl_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
