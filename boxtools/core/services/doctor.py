"""
Host diagnostics — is this machine ready to install box tools?

Read-only.  Checks that every package manager in the recipe table (plus
direnv for ``box generate direnv``) is on PATH, and which sandbox
variant install scripts will run under.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field

from boxtools.core.services.tool_install.data.recipes import TOOL_RECIPES
from boxtools.core.services.tool_install.execution.sandbox import (
    SANDBOX_LAUNCHERS,
    SandboxVariant,
    sandbox_variant,
)

logger = logging.getLogger(__name__)

# Integrations that are not tool types
_EXTRA_HOST_TOOLS = ("direnv",)

_SANDBOX_NOTES: dict[SandboxVariant, str] = {
    SandboxVariant.DENY_BY_DEFAULT: "writes limited to the project, scratch and temp dirs",
    SandboxVariant.NAMESPACE: "user/mount namespace only; writes are NOT restricted",
    SandboxVariant.NONE: "no sandbox on this platform; scripts run unrestricted",
}


@dataclass
class HostCheck:
    name: str
    path: str | None = None

    @property
    def found(self) -> bool:
        return self.path is not None


@dataclass
class DoctorReport:
    tools: list[HostCheck] = field(default_factory=list)
    sandbox: SandboxVariant = SandboxVariant.NONE
    sandbox_launcher: HostCheck | None = None
    sandbox_note: str = ""

    @property
    def ok(self) -> bool:
        launcher_ok = self.sandbox_launcher is None or self.sandbox_launcher.found
        return launcher_ok and all(t.found for t in self.tools)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "tools": {t.name: t.path for t in self.tools},
            "sandbox": {
                "variant": self.sandbox.value,
                "launcher": self.sandbox_launcher.name if self.sandbox_launcher else None,
                "launcher_path": self.sandbox_launcher.path if self.sandbox_launcher else None,
                "note": self.sandbox_note,
            },
        }


def host_tool_names() -> list[str]:
    """Host programs box depends on, sorted."""
    names = {recipe.host for recipe in TOOL_RECIPES.values()}
    names.update(_EXTRA_HOST_TOOLS)
    return sorted(names)


def run_doctor(
    *,
    platform: str | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> DoctorReport:
    """Probe the host.

    Args:
        platform: Override ``sys.platform`` for the sandbox check.
        which: PATH lookup (``shutil.which``).
    """
    report = DoctorReport()
    for name in host_tool_names():
        path = which(name)
        logger.debug("%s → %s", name, path or "not found")
        report.tools.append(HostCheck(name=name, path=path))

    report.sandbox = sandbox_variant(platform)
    report.sandbox_note = _SANDBOX_NOTES[report.sandbox]
    launcher = SANDBOX_LAUNCHERS[report.sandbox]
    if launcher:
        report.sandbox_launcher = HostCheck(name=launcher, path=which(launcher))

    return report
