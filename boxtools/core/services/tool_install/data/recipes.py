"""
L0 Data — Installer recipe table.

One frozen recipe per supported tool type.  The table is closed: the
set of tool kinds is fixed here and dispatched by
``execution.installers.run_installer``.

Pure data. No logic beyond lookup.
"""

from __future__ import annotations

from dataclasses import dataclass

from boxtools.core.errors import ConfigurationError


@dataclass(frozen=True)
class InstallerRecipe:
    """How a tool type is installed."""

    type: str
    host: str                     # host program that must be on PATH
    private_dir: str | None       # tree under .box the host installs into
    version_sep: str = "@"        # source<sep>version


TOOL_RECIPES: dict[str, InstallerRecipe] = {
    "go": InstallerRecipe(
        type="go",
        host="go",
        private_dir="go",
    ),
    "npm": InstallerRecipe(
        type="npm",
        host="npm",
        private_dir="npm",
    ),
    "cargo": InstallerRecipe(
        type="cargo",
        host="cargo-binstall",
        private_dir="cargo",
    ),
    "uv": InstallerRecipe(
        type="uv",
        host="uv",
        private_dir="uv",
        version_sep="==",
    ),
    "gem": InstallerRecipe(
        type="gem",
        host="gem",
        private_dir="gems",
    ),
    "script": InstallerRecipe(
        type="script",
        host="sh",
        private_dir=None,
    ),
}

# Per-type data directories cleaned up for tools installed before the
# manifest existed (``{name}`` is the tool identity)
LEGACY_DATA_DIRS: dict[str, str] = {
    "uv": "uv/{name}",
}

# Directory names in the .box layout that can never be a tool name
RESERVED_NAMES: frozenset[str] = frozenset(
    {".", "..", "bin"}
    | {r.private_dir for r in TOOL_RECIPES.values() if r.private_dir}
)


def get_recipe(tool_type: str) -> InstallerRecipe:
    """Look up the recipe for a tool type.

    Raises:
        ConfigurationError: If the type is not supported.
    """
    recipe = TOOL_RECIPES.get(tool_type)
    if recipe is None:
        supported = ", ".join(sorted(TOOL_RECIPES))
        raise ConfigurationError(f"unsupported tool type: {tool_type} (supported: {supported})")
    return recipe
