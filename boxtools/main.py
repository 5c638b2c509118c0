"""
box — CLI entrypoint.

Usage:
    box --help
    box install
    box run <command> [args...]
"""

from __future__ import annotations

import json
import os
import shutil
import signal
import sys
from pathlib import Path

import click

from boxtools import __version__
from boxtools.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="box")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to box.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """box — project-local developer tools."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _resolve_config_path(ctx: click.Context) -> Path | None:
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        from boxtools.core.config.loader import find_config_file

        config_path = find_config_file()
    return config_path


def _resolve_project_root(ctx: click.Context) -> Path:
    """Resolve project root from the config location or CWD."""
    config_path = _resolve_config_path(ctx)
    return config_path.parent.resolve() if config_path else Path.cwd().resolve()


def _fail(message: object) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


# ── Install ─────────────────────────────────────────────────────


class _LastLine:
    """Show the latest installer output line in place (interactive mode)."""

    def __init__(self) -> None:
        self.shown = False

    def __call__(self, line: str) -> None:
        width = max(shutil.get_terminal_size().columns - 8, 20)
        click.echo(f"\r\033[K      │ {line[:width]}", nl=False)
        self.shown = True

    def clear(self) -> None:
        if self.shown:
            click.echo("\r\033[K", nl=False)
            self.shown = False


@cli.command()
@click.option(
    "--non-interactive", "-y", is_flag=True,
    help="Plain log output (no live progress).",
)
@click.option(
    "--file", "-f", "file_path",
    type=click.Path(exists=False),
    default=None,
    help="Install from this box.yml instead.",
)
@click.pass_context
def install(ctx: click.Context, non_interactive: bool, file_path: str | None) -> None:
    """Install every tool listed in box.yml."""
    from boxtools.core.config.loader import load_config
    from boxtools.core.errors import BoxError
    from boxtools.core.services.tool_install.orchestration import InstallStatus, install_all

    config_path = Path(file_path) if file_path else _resolve_config_path(ctx)
    try:
        config = load_config(config_path)
    except BoxError as e:
        _fail(e)
    assert config_path is not None  # load_config raised otherwise
    root = config_path.parent.resolve()

    if not config.tools:
        click.secho("⚠️  No tools configured in box.yml", fg="yellow")
        return

    interactive = not non_interactive and sys.stdout.isatty()
    live = _LastLine() if interactive else None
    interrupted = False

    def _on_sigint(signum, frame) -> None:  # noqa: ARG001
        nonlocal interrupted
        interrupted = True

    def _on_start(result) -> None:
        click.secho(f"📦 Installing {result.identity} ({result.tool.type})...", fg="cyan")

    def _on_result(result) -> None:
        if live:
            live.clear()
        if result.ok:
            click.secho(f"   ✅ {result.identity}", fg="green")
        else:
            click.secho(f"   ❌ {result.identity}: {result.error}", fg="red")

    previous = signal.signal(signal.SIGINT, _on_sigint) if interactive else None
    try:
        results = install_all(
            root,
            config,
            should_continue=lambda: not interrupted,
            on_start=_on_start,
            on_result=_on_result,
            output=live,
        )
    except BoxError as e:
        _fail(e)
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)

    failed = [r for r in results if r.status is InstallStatus.FAILED]
    pending = [r for r in results if r.status is InstallStatus.PENDING]

    click.echo()
    if failed:
        click.secho(f"❌ Failed to install {failed[0].identity}", fg="red", bold=True)
        sys.exit(1)
    if pending:
        click.secho(
            f"⚠️  Stopped: {len(pending)} tool(s) not installed", fg="yellow", bold=True,
        )
        sys.exit(130 if interrupted else 1)
    click.secho(f"✅ All {len(results)} tool(s) installed", fg="green", bold=True)


# ── List / Uninstall ────────────────────────────────────────────


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List configured tools and their binaries."""
    from boxtools.core.config.loader import load_config
    from boxtools.core.errors import BoxError
    from boxtools.core.services.tool_install.orchestration import list_tools

    try:
        config = load_config(_resolve_config_path(ctx))
    except BoxError as e:
        _fail(e)
    listings = list_tools(_resolve_project_root(ctx), config)

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in listings], indent=2))
        return

    click.secho("📦 Installed tools:", fg="cyan", bold=True)
    for item in listings:
        marker = "✅" if item.installed else "⬜"
        suffix = "  (orphan, not in box.yml)" if item.orphan else ""
        click.echo(f"   {marker} {item.identity} ({item.type}){suffix}")
        if item.binaries:
            click.echo(f"      binaries: {', '.join(item.binaries)}")


@cli.command()
@click.argument("name")
@click.pass_context
def uninstall(ctx: click.Context, name: str) -> None:
    """Remove the files a tool installed.

    NAME is the tool's alias or its source as written in box.yml.
    """
    from boxtools.core.config.loader import load_config_or_empty
    from boxtools.core.errors import BoxError
    from boxtools.core.services.tool_install.orchestration import uninstall_tool

    try:
        config = load_config_or_empty(_resolve_config_path(ctx))
        tool = config.find_tool(name)
        identity = tool.display_name if tool else name
        report = uninstall_tool(_resolve_project_root(ctx), identity)
    except (BoxError, OSError) as e:
        _fail(e)

    if not report.recorded and not report.removed:
        click.secho(f"⚠️  {identity} is not installed", fg="yellow")
        return

    for rel in report.skipped:
        click.secho(f"   ⚠️  Skipped {rel}", fg="yellow")
    click.secho(
        f"✅ Uninstalled {identity} ({len(report.removed)} path(s) removed)",
        fg="green",
    )


# ── Run / Env ───────────────────────────────────────────────────


@cli.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("command")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, command: str, args: tuple[str, ...]) -> None:
    """Run a binary from .box/bin with the project environment."""
    from boxtools.core.config.loader import load_config_or_empty
    from boxtools.core.errors import BoxError
    from boxtools.core.services.environment import build_environment
    from boxtools.core.services.tool_install.data.constants import BIN_DIR, EXE_SUFFIX
    from boxtools.core.services.tool_install.execution import exec_binary, scratch_dir

    if "/" in command or "\\" in command or command in (".", ".."):
        _fail(f"invalid command name {command!r}: path separators are not allowed")

    root = _resolve_project_root(ctx)
    config = load_config_or_empty(_resolve_config_path(ctx))

    binary = root / BIN_DIR / command
    if not os.path.lexists(binary) and os.path.lexists(binary.with_name(command + EXE_SUFFIX)):
        binary = binary.with_name(command + EXE_SUFFIX)
    if not os.path.lexists(binary):
        _fail(f"binary {command} not found in {BIN_DIR}. Have you run 'box install'?")

    with scratch_dir(prefix="box-run-") as scratch:
        env = build_environment(root, config, scratch_dir=scratch)
        try:
            code = exec_binary(
                binary,
                list(args),
                env=env,
                sandbox=config.is_sandbox_enabled(command),
                root=root,
                scratch_dir=scratch,
            )
        except BoxError as e:
            _fail(e)
    # killed by signal N: exit 128+N like a shell
    sys.exit(128 - code if code < 0 else code)


@cli.command()
@click.argument("key", required=False)
@click.pass_context
def env(ctx: click.Context, key: str | None) -> None:
    """Print the project environment (or one value, without newline)."""
    from boxtools.core.config.loader import load_config_or_empty
    from boxtools.core.services.environment import build_environment

    config = load_config_or_empty(_resolve_config_path(ctx))
    merged = build_environment(_resolve_project_root(ctx), config)

    if key is not None:
        if key not in merged:
            _fail(f"environment variable {key} not found")
        # no newline, for $(box env KEY)
        click.echo(merged[key], nl=False)
        return

    for name in sorted(merged):
        click.echo(f"{name}={merged[name]}")


# ── Add / Doctor ────────────────────────────────────────────────


def _split_version(source: str) -> tuple[str, str]:
    """``source@version`` → (source, version); a leading ``@`` is a scope."""
    at = source.find("@", 1)
    if at == -1:
        return source, ""
    return source[:at], source[at + 1:]


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("tool_type", metavar="TYPE")
@click.argument("source_spec", metavar="SOURCE[@VERSION]")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def add(ctx: click.Context, tool_type: str, source_spec: str, args: tuple[str, ...]) -> None:
    """Add a tool to box.yml (e.g. ``box add uv ruff@0.1.0``)."""
    from boxtools.core.config.loader import CONFIG_FILE, load_config, save_config
    from boxtools.core.errors import BoxError
    from boxtools.core.models.tool import BoxConfig, Tool
    from boxtools.core.services.tool_install.data.recipes import get_recipe

    config_path = _resolve_config_path(ctx) or Path.cwd() / CONFIG_FILE
    source, version = _split_version(source_spec)

    try:
        get_recipe(tool_type)
        config = load_config(config_path) if config_path.exists() else BoxConfig()
    except BoxError as e:
        _fail(e)

    if any(tool.source_text == source for tool in config.tools):
        click.secho(f"⚠️  Tool with source {source} already exists in {config_path.name}", fg="yellow")
        return

    config.tools.append(Tool(type=tool_type, source=source, version=version, args=list(args)))
    save_config(config, config_path)

    label = f"{source} (version {version})" if version else source
    click.secho(f"✅ Added {label} to {config_path.name}", fg="green")
    click.echo("   Run 'box install' to install it.")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def doctor(as_json: bool) -> None:
    """Check the host for the package managers box uses."""
    from boxtools.core.services.doctor import run_doctor
    from boxtools.core.services.tool_install.execution.sandbox import SandboxVariant

    report = run_doctor()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.secho("🩺 Host environment:", fg="cyan", bold=True)
    for check in report.tools:
        if check.found:
            click.echo(f"   ✅ {check.name:<14} {check.path}")
        else:
            click.secho(f"   ❌ {check.name:<14} not found", fg="red")

    click.echo()
    click.secho(f"   Sandbox: {report.sandbox.value}", fg="white", bold=True)
    if report.sandbox_launcher:
        launcher = report.sandbox_launcher
        icon = "✅" if launcher.found else "❌"
        click.echo(f"   {icon} {launcher.name:<14} {launcher.path or 'not found'}")
    if report.sandbox is SandboxVariant.DENY_BY_DEFAULT:
        click.echo(f"   {report.sandbox_note}")
    else:
        click.secho(f"   ⚠️  {report.sandbox_note}", fg="yellow")

    click.echo()
    if report.ok:
        click.secho("✅ All external tools are ready", fg="green")
    else:
        click.secho("⚠️  Some tools are missing; tool types that need them will fail", fg="yellow")


# ── Register sub-groups ─────────────────────────────────────────

from boxtools.ui.cli.generate import generate  # noqa: E402

cli.add_command(generate)


if __name__ == "__main__":
    cli()
