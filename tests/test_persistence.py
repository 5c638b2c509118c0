"""
Tests for persistence — manifest store and project lock.
"""

import json
from pathlib import Path

import pytest

from boxtools.core.errors import LockError, ManifestIOError, UnsafePathError
from boxtools.core.models.manifest import Manifest, ToolRecord
from boxtools.core.models.tool import Tool
from boxtools.core.persistence import lock as lock_mod
from boxtools.core.persistence.lock import lock_path, project_lock
from boxtools.core.persistence.manifest_store import (
    load_manifest,
    manifest_path,
    remove_tool,
    save_manifest,
    update_manifest,
)


def _tool(**kwargs) -> Tool:
    return Tool(**{"type": "script", "source": "true", "alias": "greet", **kwargs})


class TestManifestStore:
    """Tests for manifest load/update/save."""

    def test_load_missing_returns_empty(self, box_root: Path):
        assert load_manifest(box_root) == Manifest()

    def test_load_corrupt_returns_empty(self, box_root: Path):
        path = manifest_path(box_root)
        path.parent.mkdir(parents=True)
        path.write_text("not json at all {{{")
        assert load_manifest(box_root).tools == {}

    def test_load_wrong_shape_returns_empty(self, box_root: Path):
        path = manifest_path(box_root)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"tools": ["not", "a", "mapping"]}))
        assert load_manifest(box_root).tools == {}

    def test_save_creates_box_dir(self, box_root: Path):
        save_manifest(Manifest(), box_root)
        assert manifest_path(box_root).is_file()

    def test_save_load_save_is_idempotent(self, box_root: Path):
        manifest = Manifest()
        update_manifest(manifest, _tool(), [".box/bin/greet"])
        save_manifest(manifest, box_root)
        first = manifest_path(box_root).read_bytes()

        save_manifest(load_manifest(box_root), box_root)
        assert manifest_path(box_root).read_bytes() == first

    def test_saved_json_shape(self, box_root: Path):
        manifest = Manifest()
        update_manifest(manifest, _tool(), [".box/bin/greet"])
        save_manifest(manifest, box_root)

        data = json.loads(manifest_path(box_root).read_text())
        record = data["tools"]["greet"]
        assert record["type"] == "script"
        assert record["source"] == "true"
        assert record["files"] == [".box/bin/greet"]
        assert record["installed"] == record["updated"]

    def test_save_leaves_no_temp_files(self, box_root: Path):
        save_manifest(Manifest(), box_root)
        leftovers = [p.name for p in (box_root / ".box").iterdir() if p.name != "manifest.json"]
        assert leftovers == []

    def test_save_failure_raises_manifest_io_error(self, box_root: Path):
        # .box is a file, so the manifest directory cannot be created
        (box_root / ".box").write_text("")
        with pytest.raises(ManifestIOError):
            save_manifest(Manifest(), box_root)

    def test_update_merges_and_preserves_installed(self, box_root: Path):
        manifest = Manifest()
        first = update_manifest(manifest, _tool(), [".box/bin/greet"])
        installed = first.installed

        second = update_manifest(manifest, _tool(), [".box/bin/greet2"])
        assert second.files == [".box/bin/greet", ".box/bin/greet2"]
        assert second.installed == installed
        assert second.updated >= installed

    def test_update_dedupes_and_sorts(self):
        manifest = Manifest()
        record = update_manifest(manifest, _tool(), ["b", "a", "b"])
        assert record.files == ["a", "b"]

    @pytest.mark.parametrize("bad", ["/etc/passwd", "../escape", ".box/../../x", "C:\\evil"])
    def test_update_rejects_unsafe_paths(self, bad: str):
        manifest = Manifest()
        with pytest.raises(UnsafePathError):
            update_manifest(manifest, _tool(), [bad])
        assert manifest.tools == {}

    def test_remove_tool(self):
        manifest = Manifest(tools={"greet": ToolRecord(type="script", source="true")})
        assert remove_tool(manifest, "greet") is not None
        assert remove_tool(manifest, "greet") is None
        assert manifest.tools == {}

    def test_record_binaries(self):
        record = ToolRecord(
            type="go",
            source="x",
            files=[".box/bin/task", ".box/go", ".box/go/bin/task"],
        )
        assert record.binaries() == ["task"]


class TestProjectLock:
    """Tests for the advisory project lock."""

    def test_lock_released_after_block(self, box_root: Path):
        with project_lock(box_root, operation="install") as path:
            assert path.is_file()
            holder = json.loads(path.read_text())
            assert holder["operation"] == "install"
        assert not lock_path(box_root).exists()

    def test_lock_released_on_error(self, box_root: Path):
        with pytest.raises(RuntimeError):
            with project_lock(box_root):
                raise RuntimeError("boom")
        assert not lock_path(box_root).exists()

    def test_second_holder_rejected(self, box_root: Path):
        with project_lock(box_root):
            with pytest.raises(LockError):
                with project_lock(box_root):
                    pass

    def test_stale_lock_reclaimed(self, box_root: Path, monkeypatch):
        path = lock_path(box_root)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"pid": 999999, "operation": "install"}))
        monkeypatch.setattr(lock_mod, "_pid_alive", lambda pid: False)

        with project_lock(box_root):
            assert json.loads(path.read_text())["pid"] != 999999
        assert not path.exists()

    def test_unreadable_lock_is_not_reclaimed(self, box_root: Path):
        path = lock_path(box_root)
        path.parent.mkdir(parents=True)
        path.write_text("garbage")

        with pytest.raises(LockError):
            with project_lock(box_root):
                pass
        assert path.exists()
