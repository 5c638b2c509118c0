"""
L5 Orchestration — ``__init__.py`` re-exports the top-level coordinators.
"""

from boxtools.core.services.tool_install.orchestration.listing import (  # noqa: F401
    ToolListing,
    list_tools,
)
from boxtools.core.services.tool_install.orchestration.orchestrator import (  # noqa: F401
    InstallResult,
    InstallStatus,
    install_all,
    install_tool,
)
from boxtools.core.services.tool_install.orchestration.uninstall import (  # noqa: F401
    UninstallReport,
    uninstall_tool,
)
