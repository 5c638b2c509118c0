"""
L0 Data — ``__init__.py`` re-exports layout constants and recipes.
"""

from boxtools.core.services.tool_install.data.constants import (  # noqa: F401
    BIN_DIR,
    BOX_DIR,
    EXE_SUFFIX,
    LOCK_FILE,
    MANIFEST_FILE,
    box_arch,
    box_os,
)
from boxtools.core.services.tool_install.data.recipes import (  # noqa: F401
    LEGACY_DATA_DIRS,
    RESERVED_NAMES,
    TOOL_RECIPES,
    InstallerRecipe,
    get_recipe,
)
