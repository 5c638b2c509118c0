"""
CLI commands for project file generation.

Thin wrappers over ``boxtools.core.services.generators``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click


def _resolve_project_root(ctx: click.Context) -> tuple[Path, Path | None]:
    """Resolve (project root, box.yml path) from context or CWD."""
    config_path: Path | None = ctx.obj.get("config_path")
    if config_path is None:
        from boxtools.core.config.loader import find_config_file

        config_path = find_config_file()
    root = config_path.parent.resolve() if config_path else Path.cwd().resolve()
    return root, config_path


@click.group()
def generate() -> None:
    """Generate — direnv integration, Dockerfile."""


# ── direnv ──────────────────────────────────────────────────────


@generate.command()
@click.option("--no-allow", is_flag=True, help="Don't run 'direnv allow' afterwards.")
@click.pass_context
def direnv(ctx: click.Context, no_allow: bool) -> None:
    """Write .envrc exporting BOX_* variables and .box/bin on PATH."""
    from boxtools.core.config.loader import load_config_or_empty
    from boxtools.core.errors import InstallerExecutionError
    from boxtools.core.services.generators.envrc import generate_envrc
    from boxtools.core.services.tool_install.execution import run_command

    root, config_path = _resolve_project_root(ctx)
    config = load_config_or_empty(config_path)

    generated = generate_envrc(root, config)
    try:
        generated.write(root)
    except OSError as e:
        click.secho(f"❌ Failed to write {generated.path}: {e}", fg="red")
        sys.exit(1)
    click.secho(f"✅ Generated {generated.path}", fg="green")

    if no_allow:
        return
    try:
        run_command("direnv", ["allow"], cwd=root)
    except InstallerExecutionError as e:
        click.secho(f"⚠️  Failed to run direnv allow: {e}", fg="yellow")


# ── Dockerfile ──────────────────────────────────────────────────


@generate.command()
@click.pass_context
def dockerfile(ctx: click.Context) -> None:
    """Write a Dockerfile that installs box and the project's tools."""
    from boxtools.core.services.generators.dockerfile import generate_dockerfile

    root, _ = _resolve_project_root(ctx)
    generated = generate_dockerfile()
    try:
        generated.write(root)
    except OSError as e:
        click.secho(f"❌ Failed to write {generated.path}: {e}", fg="red")
        sys.exit(1)
    click.secho(f"✅ Generated {generated.path}", fg="green")
