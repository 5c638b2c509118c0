"""
L4 Execution — Per-type installers.

``run_installer`` dispatches on the tool's type tag to one installer
function per recipe.  Each installer invokes its package manager via
the subprocess runner with a project-local prefix, then publishes the
requested binaries into .box/bin.

Every installer returns the root-relative files it knows it created;
the orchestrator unions that with the snapshot diff.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from boxtools.core.errors import ConfigurationError, DiscoveryError
from boxtools.core.models.tool import Tool
from boxtools.core.services.tool_install.data.constants import (
    BIN_DIR,
    BOX_DIR,
    EXE_SUFFIX,
    IS_WINDOWS,
    box_arch,
    box_os,
)
from boxtools.core.services.tool_install.data.recipes import InstallerRecipe, get_recipe
from boxtools.core.services.tool_install.domain.path_safety import to_relpath
from boxtools.core.services.tool_install.execution.linker import link_binaries
from boxtools.core.services.tool_install.execution.subprocess_runner import (
    OutputCallback,
    run_command,
)

logger = logging.getLogger(__name__)


@dataclass
class InstallContext:
    """Everything an installer needs besides the tool itself."""

    root: Path
    scratch_dir: Path | None = None
    env: dict[str, str] = field(default_factory=dict)   # box.yml env
    output: OutputCallback | None = None
    platform: str | None = None

    @property
    def box_dir(self) -> Path:
        return self.root / BOX_DIR

    @property
    def bin_dir(self) -> Path:
        return self.root / BIN_DIR

    def run(
        self,
        command: str,
        args: list[str],
        *,
        env: dict[str, str] | None = None,
        unset_env: tuple[str, ...] = (),
        cwd: Path | None = None,
        sandbox: bool = False,
    ) -> None:
        run_command(
            command,
            args,
            env=env,
            unset_env=unset_env,
            cwd=cwd,
            sandbox=sandbox,
            root=self.root,
            scratch_dir=self.scratch_dir,
            output=self.output,
            platform=self.platform,
        )


def run_installer(tool: Tool, ctx: InstallContext, *, sandbox: bool) -> list[str]:
    """Install ``tool`` with the installer for its type.

    Returns:
        Root-relative files the installer reports as created.

    Raises:
        ConfigurationError: Unsupported type or invalid version.
        InstallerExecutionError: The package manager failed.
        DiscoveryError: A requested binary was not produced.
    """
    recipe = get_recipe(tool.type)
    logger.info("Installing %s (%s)", tool.display_name, recipe.type)

    match recipe.type:
        case "go":
            return _install_go(tool, recipe, ctx, sandbox)
        case "npm":
            return _install_npm(tool, recipe, ctx, sandbox)
        case "cargo":
            return _install_cargo(tool, recipe, ctx, sandbox)
        case "uv":
            return _install_uv(tool, recipe, ctx, sandbox)
        case "gem":
            return _install_gem(tool, recipe, ctx, sandbox)
        case "script":
            return _install_script(tool, ctx, sandbox)
    raise ConfigurationError(f"no installer for tool type: {recipe.type}")


# ── Helpers ─────────────────────────────────────────────────────


def versioned_source(tool: Tool, recipe: InstallerRecipe) -> str:
    """``source<sep>version`` (or just the source if unversioned)."""
    if tool.version:
        return f"{tool.source_text}{recipe.version_sep}{tool.version}"
    return tool.source_text


def _private_dirs(recipe: InstallerRecipe, ctx: InstallContext) -> tuple[Path, Path]:
    """The recipe's private tree under .box and its bin search dir."""
    assert recipe.private_dir is not None
    private = ctx.box_dir / recipe.private_dir
    return private, private / "bin"


def _publish(tool: Tool, search_dir: Path, ctx: InstallContext) -> list[str]:
    return link_binaries(ctx.root, search_dir, ctx.bin_dir, tool.binary_names())


# ── Package-manager installers ──────────────────────────────────


def _install_go(tool: Tool, recipe: InstallerRecipe, ctx: InstallContext, sandbox: bool) -> list[str]:
    version = tool.version
    if version and version[0].isdigit():
        raise ConfigurationError(
            f"go tools require a 'v' prefix for versions (e.g., v{version} instead of {version})"
        )

    go_dir, go_bin = _private_dirs(recipe, ctx)
    go_dir.mkdir(parents=True, exist_ok=True)

    # GOBIN from the user's shell would send binaries outside the project
    ctx.run(
        "go",
        ["install", versioned_source(tool, recipe)],
        env={"GOPATH": str(go_dir)},
        unset_env=("GOBIN",),
        sandbox=sandbox,
    )
    return _publish(tool, go_bin, ctx)


def _install_npm(tool: Tool, recipe: InstallerRecipe, ctx: InstallContext, sandbox: bool) -> list[str]:
    npm_dir, npm_bin = _private_dirs(recipe, ctx)
    args = ["install", "--prefix", str(npm_dir), "-g", *tool.args, versioned_source(tool, recipe)]
    ctx.run("npm", args, sandbox=sandbox)
    return _publish(tool, npm_bin, ctx)


def _install_cargo(tool: Tool, recipe: InstallerRecipe, ctx: InstallContext, sandbox: bool) -> list[str]:
    cargo_dir, cargo_bin = _private_dirs(recipe, ctx)
    args = ["--root", str(cargo_dir), "-y", *tool.args, versioned_source(tool, recipe)]
    ctx.run("cargo-binstall", args, sandbox=sandbox)
    return _publish(tool, cargo_bin, ctx)


def _install_uv(tool: Tool, recipe: InstallerRecipe, ctx: InstallContext, sandbox: bool) -> list[str]:
    uv_dir, uv_bin = _private_dirs(recipe, ctx)
    env = {
        "UV_TOOL_DIR": str(uv_dir),
        "UV_TOOL_BIN_DIR": str(uv_bin),
    }
    args = ["tool", "install", "--force", *tool.args, versioned_source(tool, recipe)]
    ctx.run("uv", args, env=env, sandbox=sandbox)
    return _publish(tool, uv_bin, ctx)


def _install_gem(tool: Tool, recipe: InstallerRecipe, ctx: InstallContext, sandbox: bool) -> list[str]:
    gem_dir, gem_bin = _private_dirs(recipe, ctx)
    args = ["install", "--install-dir", str(gem_dir), "--bindir", str(gem_bin), "--no-document"]
    if tool.version:
        args += ["-v", tool.version]
    args += [*tool.args, tool.source_text]
    ctx.run("gem", args, sandbox=sandbox)
    return _publish(tool, gem_bin, ctx)


# ── Script installer ────────────────────────────────────────────


def script_env(ctx: InstallContext) -> dict[str, str]:
    """Environment exported to install scripts."""
    env = {
        "BOX_DIR": str(ctx.box_dir),
        "BOX_BIN_DIR": str(ctx.bin_dir),
        "BOX_OS": box_os(),
        "BOX_ARCH": box_arch(),
        "PATH": f"{ctx.bin_dir}{os.pathsep}{os.environ.get('PATH', '')}",
    }
    if ctx.scratch_dir:
        for key in ("TMPDIR", "TEMP", "TMP"):
            env[key] = str(ctx.scratch_dir)
    env.update(ctx.env)
    return env


def _install_script(tool: Tool, ctx: InstallContext, sandbox: bool) -> list[str]:
    ctx.run("sh", ["-c", tool.source_text], env=script_env(ctx), cwd=ctx.root, sandbox=sandbox)

    # Scripts place binaries themselves (via $BOX_BIN_DIR); only verify
    reported: list[str] = []
    for name in tool.binaries:
        path = ctx.bin_dir / name
        if IS_WINDOWS and not name.endswith(EXE_SUFFIX):
            path = path.with_name(name + EXE_SUFFIX)
        if not (path.exists() or path.is_symlink()):
            raise DiscoveryError(name, ctx.bin_dir)
        reported.append(to_relpath(ctx.root, path))
    return reported
