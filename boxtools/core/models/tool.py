"""
Tool configuration models — the contents of box.yml.

A ``Tool`` is a declaration of intent: "install this package with this
package manager." What actually landed on disk is tracked separately
in the manifest (see ``boxtools.core.models.manifest``).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_serializer, field_validator


def detect_binary_name(source: str) -> str:
    """Infer the executable name from a package source string.

    ``github.com/go-task/task/v3/cmd/task`` → ``task``,
    ``ruff==0.1.0`` → ``ruff``, ``github.com/org/repo/v2`` → ``repo``.
    Scoped npm packages keep their leading ``@``: ``@biomejs/biome`` → ``biome``.
    """
    at = source.find("@", 1)
    path = source[:at] if at != -1 else source
    path = path.split("==", 1)[0]

    # Strip a trailing major-version segment (/v2, /v3, ...)
    parts = path.split("/")
    if len(parts) > 1:
        last = parts[-1]
        if len(last) >= 2 and last[0] == "v" and last[1:].isdigit():
            path = "/".join(parts[:-1])

    return path.rsplit("/", 1)[-1]


class Tool(BaseModel):
    """A single tool declared in box.yml."""

    type: str
    source: list[str]
    alias: str = ""
    version: str = ""
    binaries: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)
    sandbox: bool | None = None  # None → default for the tool type

    @field_validator("source", mode="before")
    @classmethod
    def _coerce_source(cls, value: object) -> object:
        # box.yml accepts a single string or a list of lines
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: object) -> object:
        # YAML turns `version: 1.2` into a float
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_serializer("source")
    def _serialize_source(self, source: list[str]) -> str | list[str]:
        if len(source) == 1:
            return source[0]
        return source

    @property
    def source_text(self) -> str:
        """The source as a single string (lines joined by newlines)."""
        return "\n".join(self.source)

    @property
    def display_name(self) -> str:
        """Identity used as the manifest key: alias, else the source."""
        return self.alias or self.source_text

    @property
    def sandbox_enabled(self) -> bool:
        """Scripts run sandboxed unless explicitly disabled."""
        if self.sandbox is not None:
            return self.sandbox
        return self.type == "script"

    def binary_names(self) -> list[str]:
        """Explicit binaries, or the one inferred from the source."""
        if self.binaries:
            return list(self.binaries)
        return [detect_binary_name(self.source_text)]

    def provides(self, binary: str) -> bool:
        """Whether this tool publishes ``binary`` into .box/bin."""
        if self.binaries:
            return binary in self.binaries
        return detect_binary_name(self.source_text) == binary


class BoxConfig(BaseModel):
    """Root configuration — loaded from box.yml."""

    tools: list[Tool] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("env", mode="before")
    @classmethod
    def _coerce_env(cls, value: object) -> object:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): "" if v is None else _scalar_text(v) for k, v in value.items()}
        return value

    def find_tool(self, identity: str) -> Tool | None:
        """Look up a tool by display name or source."""
        for tool in self.tools:
            if identity in (tool.display_name, tool.source_text):
                return tool
        return None

    def find_tool_for_binary(self, binary: str) -> Tool | None:
        """Look up which tool publishes the given binary name."""
        for tool in self.tools:
            if tool.provides(binary):
                return tool
        return None

    def is_sandbox_enabled(self, binary: str) -> bool:
        tool = self.find_tool_for_binary(binary)
        return tool.sandbox_enabled if tool else False


def _scalar_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
