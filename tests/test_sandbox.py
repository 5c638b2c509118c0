"""
Tests for the sandbox applier (pure command rewriting).
"""

import os
import tempfile
from pathlib import Path

import pytest

from boxtools.core.services.tool_install.execution.sandbox import (
    SandboxVariant,
    allowed_write_paths,
    apply_sandbox,
    build_write_profile,
    sandbox_variant,
)


class TestSandboxVariant:
    """Platform → sandbox variant."""

    def test_variants(self):
        assert sandbox_variant("darwin") is SandboxVariant.DENY_BY_DEFAULT
        assert sandbox_variant("linux") is SandboxVariant.NAMESPACE
        assert sandbox_variant("win32") is SandboxVariant.NONE
        assert sandbox_variant("none") is SandboxVariant.NONE


class TestApplySandbox:
    """Tests for command rewriting per platform."""

    def test_darwin_wraps_with_sandbox_exec(self, tmp_path: Path):
        command, args = apply_sandbox("sh", ["-c", "true"], tmp_path, platform="darwin")

        assert command == "sandbox-exec"
        assert args[0] == "-p"
        assert "(deny file-write*)" in args[1]
        assert args[2:] == ["sh", "-c", "true"]

    def test_linux_wraps_with_unshare(self, tmp_path: Path):
        command, args = apply_sandbox("sh", ["-c", "true"], tmp_path, platform="linux")

        assert command == "unshare"
        assert args == ["--user", "--map-root-user", "--mount", "--", "sh", "-c", "true"]

    def test_other_platforms_pass_through(self, tmp_path: Path):
        original = ["-c", "true"]
        command, args = apply_sandbox("sh", original, tmp_path, platform="win32")

        assert (command, args) == ("sh", ["-c", "true"])
        assert args is not original


@pytest.mark.skipif(os.name == "nt", reason="POSIX paths in SBPL profiles")
class TestWriteProfile:
    """Tests for the deny-by-default SBPL profile."""

    def test_allows_root_scratch_and_temp(self, tmp_path: Path):
        root = tmp_path / "project"
        scratch = tmp_path / "scratch"
        root.mkdir()
        scratch.mkdir()

        paths = allowed_write_paths(root, scratch)

        assert str(root) in paths
        assert os.path.realpath(root) in paths
        assert str(scratch) in paths
        assert tempfile.gettempdir() in paths
        assert len(paths) == len(set(paths))

    def test_no_scratch_means_system_temp(self, tmp_path: Path):
        paths = allowed_write_paths(tmp_path)
        assert tempfile.gettempdir() in paths

    def test_profile_is_deny_by_default(self, tmp_path: Path):
        profile = build_write_profile(tmp_path)
        lines = profile.splitlines()

        assert lines[:3] == ["(version 1)", "(allow default)", "(deny file-write*)"]
        assert f'(allow file-write* (subpath "{tmp_path}"))' in lines
        assert '(allow file-write* (literal "/dev/null"))' in lines

    def test_profile_escapes_quotes(self, tmp_path: Path):
        odd = tmp_path / 'we"ird'
        odd.mkdir()
        profile = build_write_profile(odd)
        assert 'we\\"ird' in profile
