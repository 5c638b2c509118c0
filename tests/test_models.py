"""
Tests for box.yml models — Tool, BoxConfig, binary-name inference.
"""

import pytest

from boxtools.core.models.tool import BoxConfig, Tool, detect_binary_name


class TestDetectBinaryName:
    """Inferring the executable name from a package source."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("github.com/go-task/task/v3/cmd/task", "task"),
            ("github.com/org/repo/v2", "repo"),
            ("github.com/org/repo@v1.2.3", "repo"),
            ("ruff==0.1.0", "ruff"),
            ("prettier@3.0.0", "prettier"),
            ("@biomejs/biome", "biome"),
            ("@biomejs/biome@1.9.0", "biome"),
            ("ripgrep", "ripgrep"),
        ],
    )
    def test_detect(self, source: str, expected: str):
        assert detect_binary_name(source) == expected


class TestTool:
    """Tests for a single tool declaration."""

    def test_string_source_becomes_list(self):
        tool = Tool(type="go", source="github.com/a/b")
        assert tool.source == ["github.com/a/b"]
        assert tool.source_text == "github.com/a/b"

    def test_list_source_joined_with_newlines(self):
        tool = Tool(type="script", source=["echo a", "echo b"])
        assert tool.source_text == "echo a\necho b"

    def test_numeric_version_coerced(self):
        tool = Tool.model_validate({"type": "uv", "source": "ruff", "version": 0.5})
        assert tool.version == "0.5"

    def test_null_version_is_empty(self):
        tool = Tool.model_validate({"type": "uv", "source": "ruff", "version": None})
        assert tool.version == ""

    def test_display_name_prefers_alias(self):
        assert Tool(type="uv", source="ruff", alias="lint").display_name == "lint"
        assert Tool(type="uv", source="ruff").display_name == "ruff"

    def test_scripts_sandboxed_by_default(self):
        assert Tool(type="script", source="true").sandbox_enabled is True
        assert Tool(type="go", source="x").sandbox_enabled is False

    def test_sandbox_flag_overrides_default(self):
        assert Tool(type="script", source="true", sandbox=False).sandbox_enabled is False
        assert Tool(type="npm", source="x", sandbox=True).sandbox_enabled is True

    def test_binary_names_explicit_or_inferred(self):
        assert Tool(type="go", source="github.com/a/b/cmd/c").binary_names() == ["c"]
        tool = Tool(type="npm", source="typescript", binaries=["tsc", "tsserver"])
        assert tool.binary_names() == ["tsc", "tsserver"]

    def test_single_source_dumps_as_scalar(self):
        data = Tool(type="uv", source="ruff").model_dump(mode="json")
        assert data["source"] == "ruff"

    def test_multi_line_source_dumps_as_list(self):
        data = Tool(type="script", source=["a", "b"]).model_dump(mode="json")
        assert data["source"] == ["a", "b"]


class TestBoxConfig:
    """Tests for the root configuration model."""

    def test_env_values_coerced_to_strings(self):
        config = BoxConfig.model_validate({"env": {"DEBUG": True, "PORT": 8080, "EMPTY": None}})
        assert config.env == {"DEBUG": "true", "PORT": "8080", "EMPTY": ""}

    def test_find_tool_by_alias_or_source(self):
        config = BoxConfig(tools=[Tool(type="uv", source="ruff", alias="lint")])
        assert config.find_tool("lint") is config.tools[0]
        assert config.find_tool("ruff") is config.tools[0]
        assert config.find_tool("black") is None

    def test_find_tool_for_binary(self):
        config = BoxConfig(tools=[
            Tool(type="go", source="github.com/go-task/task/v3/cmd/task"),
            Tool(type="script", source="true", binaries=["greet"]),
        ])
        assert config.find_tool_for_binary("task") is config.tools[0]
        assert config.find_tool_for_binary("greet") is config.tools[1]
        assert config.find_tool_for_binary("other") is None

    def test_is_sandbox_enabled_follows_owning_tool(self):
        config = BoxConfig(tools=[
            Tool(type="script", source="true", binaries=["greet"]),
            Tool(type="go", source="github.com/a/task"),
        ])
        assert config.is_sandbox_enabled("greet") is True
        assert config.is_sandbox_enabled("task") is False
        assert config.is_sandbox_enabled("unknown") is False
