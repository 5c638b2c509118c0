"""
Shared test fixtures and configuration.

Installs in tests run with ``platform="none"`` (the pass-through
sandbox variant): the real launchers (unshare, sandbox-exec) are
exercised only by tests under ``tests/integration``.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def box_root(tmp_path: Path) -> Path:
    """An empty project directory (resolved, so paths compare cleanly)."""
    root = tmp_path / "project"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def write_box_yml(box_root: Path):
    """Write ``box.yml`` from a dict and return its path."""

    def _write(data: dict) -> Path:
        path = box_root / "box.yml"
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def greet_tool() -> dict:
    """A script tool that publishes an executable ``greet`` (exit code 3)."""
    return {
        "type": "script",
        "alias": "greet",
        "source": (
            'printf \'#!/bin/sh\\necho "hello $1"\\nexit 3\\n\' > "$BOX_BIN_DIR/greet" '
            '&& chmod +x "$BOX_BIN_DIR/greet"'
        ),
        "binaries": ["greet"],
        "sandbox": False,
    }
