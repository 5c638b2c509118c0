"""
Tests for ownership inference — snapshots, diffs and path containment.
"""

import os
from pathlib import Path

import pytest

from boxtools.core.errors import UnsafePathError
from boxtools.core.services.tool_install.detection import capture_state
from boxtools.core.services.tool_install.domain import (
    diff_states,
    is_safe_relpath,
    merge_files,
    owned_files,
    resolve_inside_root,
    to_relpath,
)


class TestCaptureState:
    """Tests for filesystem snapshots of .box."""

    def test_missing_box_dir_is_empty(self, box_root: Path):
        assert capture_state(box_root) == set()

    def test_lists_files_and_dirs_relative_to_root(self, box_root: Path):
        (box_root / ".box" / "bin").mkdir(parents=True)
        (box_root / ".box" / "bin" / "tool").write_text("")
        (box_root / "outside.txt").write_text("")

        assert capture_state(box_root) == {".box/bin", ".box/bin/tool"}

    def test_bookkeeping_files_excluded(self, box_root: Path):
        box = box_root / ".box"
        box.mkdir()
        (box / "manifest.json").write_text("{}")
        (box / ".lock").write_text("{}")
        (box / ".manifest_abc.tmp").write_text("")

        assert capture_state(box_root) == set()

    def test_one_new_file_is_the_whole_diff(self, box_root: Path):
        (box_root / ".box" / "go" / "bin").mkdir(parents=True)
        before = capture_state(box_root)
        (box_root / ".box" / "go" / "bin" / "task").write_text("")
        after = capture_state(box_root)

        assert diff_states(before, after) == {".box/go/bin/task"}

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_symlinked_dir_not_descended(self, box_root: Path, tmp_path: Path):
        external = tmp_path / "external"
        external.mkdir()
        (external / "secret").write_text("")
        (box_root / ".box").mkdir()
        (box_root / ".box" / "ext").symlink_to(external, target_is_directory=True)

        assert capture_state(box_root) == {".box/ext"}


class TestOwnedFiles:
    """Tests for the pure ownership functions."""

    def test_union_of_diff_and_reported(self):
        before = {".box/bin"}
        after = {".box/bin", ".box/bin/a"}
        assert owned_files(before, after, [".box/bin/b"]) == [".box/bin/a", ".box/bin/b"]

    def test_reported_files_already_present_are_kept(self):
        state = {".box/bin", ".box/bin/a"}
        assert owned_files(state, state, [".box/bin/a"]) == [".box/bin/a"]

    def test_merge_never_drops(self):
        assert merge_files(["a", "c"], ["b"]) == ["a", "b", "c"]
        assert merge_files(["a"], []) == ["a"]


class TestPathSafety:
    """Tests for root containment checks."""

    @pytest.mark.parametrize(
        "rel",
        ["", "/etc/passwd", "\\share", "..", "a/../b", "a\\..\\b", "C:foo", "C:\\x", "a\x00b"],
    )
    def test_unsafe_relpaths(self, rel: str):
        assert is_safe_relpath(rel) is False

    @pytest.mark.parametrize("rel", [".box/bin/tool", "a", ".box/uv/ruff/lib", "..a/b"])
    def test_safe_relpaths(self, rel: str):
        assert is_safe_relpath(rel) is True

    def test_to_relpath_is_posix(self, box_root: Path):
        assert to_relpath(box_root, box_root / ".box" / "bin" / "x") == ".box/bin/x"

    def test_resolve_inside_root(self, box_root: Path):
        (box_root / ".box" / "bin").mkdir(parents=True)
        assert resolve_inside_root(box_root, ".box/bin/x") == box_root / ".box" / "bin" / "x"

    def test_resolve_rejects_traversal(self, box_root: Path):
        with pytest.raises(UnsafePathError):
            resolve_inside_root(box_root, "../outside")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_resolve_rejects_symlinked_parent_escape(self, box_root: Path, tmp_path: Path):
        external = tmp_path / "external"
        external.mkdir()
        (box_root / "link").symlink_to(external, target_is_directory=True)

        with pytest.raises(UnsafePathError):
            resolve_inside_root(box_root, "link/secret")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
    def test_resolve_keeps_final_symlink_unresolved(self, box_root: Path, tmp_path: Path):
        target = tmp_path / "target"
        target.write_text("")
        (box_root / "tool").symlink_to(target)

        assert resolve_inside_root(box_root, "tool") == box_root / "tool"
