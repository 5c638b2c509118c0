"""
Error taxonomy — every failure box reports derives from ``BoxError``.

Errors raised deep inside the install/uninstall pipeline bubble up to
the orchestrator boundary, which annotates them with the failing
operation (``err.operation``) before handing them to the CLI.
"""

from __future__ import annotations

from pathlib import Path


class BoxError(Exception):
    """Base class for all box errors."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def annotate(self, operation: str) -> BoxError:
        """Record the operation that failed (first annotation wins)."""
        if not self.operation:
            self.operation = operation
        return self

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class ConfigurationError(BoxError):
    """Invalid configuration — unknown tool type, bad box.yml, bad version."""


class InstallerExecutionError(BoxError):
    """An installer subprocess failed or could not be started."""

    def __init__(
        self,
        message: str,
        *,
        exit_code: int | None = None,
        operation: str = "",
    ) -> None:
        super().__init__(message, operation=operation)
        self.exit_code = exit_code


class DiscoveryError(BoxError):
    """A binary could not be found in an installer's output tree."""

    def __init__(self, name: str, search_dir: Path | str, *, operation: str = "") -> None:
        super().__init__(
            f"could not find installed binary {name} in {search_dir}",
            operation=operation,
        )
        self.name = name
        self.search_dir = Path(search_dir)


class ManifestIOError(BoxError):
    """The manifest could not be written."""


class UnsafePathError(BoxError):
    """A path escapes the managed root."""

    def __init__(self, path: str, *, operation: str = "") -> None:
        super().__init__(f"unsafe path outside project root: {path}", operation=operation)
        self.path = path


class LockError(BoxError):
    """Another box invocation holds the project lock."""
