"""
L4 Execution — ``__init__.py`` re-exports all execution functions.

These functions WRITE to the system: subprocess calls, sandbox
wrapping, binary publishing, scratch directories.
"""

from boxtools.core.services.tool_install.execution.installers import (  # noqa: F401
    InstallContext,
    run_installer,
    script_env,
    versioned_source,
)
from boxtools.core.services.tool_install.execution.linker import (  # noqa: F401
    link_binaries,
)
from boxtools.core.services.tool_install.execution.sandbox import (  # noqa: F401
    SANDBOX_LAUNCHERS,
    SandboxVariant,
    allowed_write_paths,
    apply_sandbox,
    build_write_profile,
    sandbox_variant,
)
from boxtools.core.services.tool_install.execution.scratch import (  # noqa: F401
    remove_tree,
    scratch_dir,
)
from boxtools.core.services.tool_install.execution.subprocess_runner import (  # noqa: F401
    OutputCallback,
    build_env,
    exec_binary,
    run_command,
)
