"""
L0 Data — Layout constants for the managed subtree.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

import platform
import sys

# Everything box installs lives under <root>/.box
BOX_DIR = ".box"
BIN_DIR = f"{BOX_DIR}/bin"
MANIFEST_FILE = f"{BOX_DIR}/manifest.json"
LOCK_FILE = f"{BOX_DIR}/.lock"

# Prefix of the manifest's atomic-write temp files (never owned by a tool)
MANIFEST_TMP_PREFIX = ".manifest_"

# Platform executable suffix (matched on every platform by find_binary)
EXE_SUFFIX = ".exe"
IS_WINDOWS = sys.platform.startswith("win")

# Architecture name normalization to Go-style names, exported to
# install scripts as BOX_ARCH.
_IARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "AMD64": "amd64",      # Windows / WSL2
    "aarch64": "arm64",
    "arm64": "arm64",      # macOS (Darwin reports arm64)
    "armv7l": "arm",
    "i686": "386",
    "i386": "386",
}

_OS_MAP: dict[str, str] = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "freebsd": "freebsd",
}


def box_os() -> str:
    """Go-style OS name for the running platform."""
    for prefix, name in _OS_MAP.items():
        if sys.platform.startswith(prefix):
            return name
    return sys.platform


def box_arch() -> str:
    """Go-style architecture name for the running machine."""
    machine = platform.machine()
    return _IARCH_MAP.get(machine, machine.lower())
