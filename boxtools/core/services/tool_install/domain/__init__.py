"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls and NO network calls.
"""

from boxtools.core.services.tool_install.domain.ownership import (  # noqa: F401
    diff_states,
    merge_files,
    owned_files,
)
from boxtools.core.services.tool_install.domain.path_safety import (  # noqa: F401
    is_safe_relpath,
    resolve_inside_root,
    to_relpath,
)
