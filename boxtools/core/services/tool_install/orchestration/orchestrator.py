"""
L5 Orchestration — Install coordinators.

These functions tie everything together: snapshot the managed tree,
run the installer, infer ownership from the snapshot diff and record
it in the manifest.

Per-tool lifecycle::

    PENDING ──► RUNNING ──► SUCCEEDED
                   │
                   └──────► FAILED    (manifest untouched, partial files kept)
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from boxtools.core.errors import BoxError
from boxtools.core.models.tool import BoxConfig, Tool
from boxtools.core.persistence.lock import project_lock
from boxtools.core.persistence.manifest_store import (
    load_manifest,
    save_manifest,
    update_manifest,
)
from boxtools.core.services.tool_install.data.constants import BIN_DIR
from boxtools.core.services.tool_install.detection.snapshot import capture_state
from boxtools.core.services.tool_install.domain.ownership import owned_files
from boxtools.core.services.tool_install.execution.installers import (
    InstallContext,
    run_installer,
)
from boxtools.core.services.tool_install.execution.scratch import scratch_dir as make_scratch_dir
from boxtools.core.services.tool_install.execution.subprocess_runner import OutputCallback

logger = logging.getLogger(__name__)


class InstallStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class InstallResult:
    """Outcome of one tool's install."""

    tool: Tool
    status: InstallStatus = InstallStatus.PENDING
    files: list[str] = field(default_factory=list)
    error: BoxError | None = None
    elapsed_ms: int = 0

    @property
    def identity(self) -> str:
        return self.tool.display_name

    @property
    def ok(self) -> bool:
        return self.status is InstallStatus.SUCCEEDED


def install_tool(
    root: Path,
    tool: Tool,
    *,
    scratch_dir: Path | None = None,
    env: dict[str, str] | None = None,
    output: OutputCallback | None = None,
    platform: str | None = None,
    result: InstallResult | None = None,
) -> InstallResult:
    """Install one tool and record the files it created.

    The caller is expected to hold the project lock (``install_all``
    does).  Errors never escape: they are annotated with the operation
    and returned on the result with ``status == FAILED``.

    Args:
        root: Absolute project root.
        tool: Tool declaration from box.yml.
        scratch_dir: Writable temp dir for the installer.
        env: box.yml environment (exported to install scripts).
        output: Receives each line of installer output.
        platform: Override the sandbox platform selection.
        result: Existing PENDING result to advance (``install_all``).

    Returns:
        The tool's ``InstallResult``.
    """
    result = result or InstallResult(tool=tool)
    result.status = InstallStatus.RUNNING
    operation = f"install {tool.display_name}"
    start = time.monotonic()

    ctx = InstallContext(
        root=root,
        scratch_dir=scratch_dir,
        env=dict(env or {}),
        output=output,
        platform=platform,
    )

    try:
        (root / BIN_DIR).mkdir(parents=True, exist_ok=True)
        before = capture_state(root)

        reported = run_installer(tool, ctx, sandbox=tool.sandbox_enabled)

        after = capture_state(root)
        files = owned_files(before, after, reported)

        manifest = load_manifest(root)
        record = update_manifest(manifest, tool, files)
        save_manifest(manifest, root)
    except BoxError as e:
        _fail(result, e.annotate(operation), start)
        return result
    except OSError as e:
        _fail(result, BoxError(str(e), operation=operation), start)
        return result

    result.files = list(record.files)
    result.status = InstallStatus.SUCCEEDED
    result.elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Installed %s: %d new path(s), %d owned in total (%dms)",
        tool.display_name, len(files), len(record.files), result.elapsed_ms,
    )
    return result


def _fail(result: InstallResult, error: BoxError, start: float) -> None:
    result.status = InstallStatus.FAILED
    result.error = error
    result.elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.error("%s", error)


def install_all(
    root: Path,
    config: BoxConfig,
    *,
    should_continue: Callable[[], bool] | None = None,
    on_start: Callable[[InstallResult], None] | None = None,
    on_result: Callable[[InstallResult], None] | None = None,
    output: OutputCallback | None = None,
    platform: str | None = None,
) -> list[InstallResult]:
    """Install every configured tool in declaration order.

    Stops at the first failure.  ``should_continue`` is polled before
    each tool; returning False (e.g. after Ctrl+C) stops scheduling,
    leaving the remaining results PENDING.

    The whole sequence runs under the project lock with one scratch
    directory, removed on every exit path.

    Returns:
        One ``InstallResult`` per configured tool, in order.

    Raises:
        LockError: If another box process holds the project lock.
    """
    results = [InstallResult(tool=tool) for tool in config.tools]
    if not results:
        logger.info("No tools configured")
        return results

    with project_lock(root, operation="install"), make_scratch_dir() as scratch:
        for result in results:
            if should_continue is not None and not should_continue():
                logger.warning("Install interrupted before %s", result.identity)
                break

            if on_start:
                on_start(result)

            install_tool(
                root,
                result.tool,
                scratch_dir=scratch,
                env=config.env,
                output=output,
                platform=platform,
                result=result,
            )

            if on_result:
                on_result(result)

            if not result.ok:
                break

    done = sum(1 for r in results if r.ok)
    logger.info("Installed %d/%d tool(s)", done, len(results))
    return results
