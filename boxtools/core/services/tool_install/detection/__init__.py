"""
L3 Detection — ``__init__.py`` re-exports read-only probes.

These functions READ the filesystem; they never modify it.
"""

from boxtools.core.services.tool_install.detection.binaries import (  # noqa: F401
    find_binary,
)
from boxtools.core.services.tool_install.detection.snapshot import (  # noqa: F401
    capture_state,
)
