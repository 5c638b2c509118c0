"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where installer subprocesses are spawned.  Sandbox
wrapping, environment merging, output streaming and exit-code handling
are centralised here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from boxtools.core.errors import InstallerExecutionError
from boxtools.core.observability.logging_config import INSTALLER_OUTPUT_LOGGER
from boxtools.core.services.tool_install.execution.sandbox import apply_sandbox

logger = logging.getLogger(__name__)
output_logger = logging.getLogger(INSTALLER_OUTPUT_LOGGER)

# Receives each line of installer output (stdout and stderr merged)
OutputCallback = Callable[[str], None]


def build_env(extra: Mapping[str, str] | None = None, *, drop: tuple[str, ...] = ()) -> dict[str, str]:
    """Current environment, minus ``drop``, plus ``extra`` (extra wins)."""
    env = {k: v for k, v in os.environ.items() if k not in drop}
    if extra:
        env.update(extra)
    return env


def run_command(
    command: str,
    args: list[str],
    *,
    env: Mapping[str, str] | None = None,
    unset_env: tuple[str, ...] = (),
    cwd: Path | str | None = None,
    sandbox: bool = False,
    root: Path | None = None,
    scratch_dir: Path | None = None,
    output: OutputCallback | None = None,
    platform: str | None = None,
) -> None:
    """Run an installer command to completion.

    Args:
        command: Executable name or path.
        args: Argument list.
        env: Extra environment entries, merged over ``os.environ``.
        unset_env: Inherited variables to remove before merging.
        cwd: Working directory override.
        sandbox: Wrap the command with the platform sandbox.
        root: Project root (required when ``sandbox`` is set).
        scratch_dir: Scratch dir allowed for writes inside the sandbox.
        output: Called with each output line (default: logged at INFO).
        platform: Override the sandbox platform selection.

    Raises:
        InstallerExecutionError: On spawn failure (``exit_code=None``)
            or a nonzero exit status.
    """
    if sandbox:
        if root is None:
            raise ValueError("sandboxed commands need the project root")
        command, args = apply_sandbox(command, args, root, scratch_dir, platform=platform)

    merged_env = build_env(env, drop=unset_env)
    emit = output or output_logger.info

    logger.info("Running: %s %s", command, " ".join(args))
    start = time.monotonic()
    try:
        proc = subprocess.Popen(
            [command, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            env=merged_env,
            cwd=str(cwd) if cwd else None,
        )
    except OSError as e:
        raise InstallerExecutionError(f"failed to start {command}: {e}") from e

    tail: list[str] = []
    with proc:
        try:
            for line in proc.stdout or ():
                line = line.rstrip()
                if not line:
                    continue
                emit(line)
                tail = (tail + [line])[-20:]
        except BaseException:
            # stop the child before the pipe is closed under it
            proc.kill()
            raise
        returncode = proc.wait()
    elapsed_ms = int((time.monotonic() - start) * 1000)

    if returncode != 0:
        logger.debug("%s exited %d after %dms", command, returncode, elapsed_ms)
        detail = f": {tail[-1]}" if tail else ""
        raise InstallerExecutionError(
            f"{command} failed (exit {returncode}){detail}",
            exit_code=returncode,
        )

    logger.debug("%s finished in %dms", command, elapsed_ms)


def exec_binary(
    binary: Path,
    args: list[str],
    *,
    env: Mapping[str, str],
    sandbox: bool = False,
    root: Path | None = None,
    scratch_dir: Path | None = None,
    platform: str | None = None,
) -> int:
    """Run a published binary attached to the terminal; return its exit code.

    ``env`` is the complete environment for the child.

    Raises:
        InstallerExecutionError: If the binary cannot be started.
    """
    command, cmd_args = str(binary), list(args)
    if sandbox:
        if root is None:
            raise ValueError("sandboxed commands need the project root")
        command, cmd_args = apply_sandbox(command, cmd_args, root, scratch_dir, platform=platform)

    logger.debug("Executing: %s %s", command, " ".join(cmd_args))
    try:
        completed = subprocess.run([command, *cmd_args], env=dict(env), check=False)
    except OSError as e:
        raise InstallerExecutionError(f"failed to execute {binary.name}: {e}") from e
    return completed.returncode
