"""
Domain models — box.yml configuration, the ownership manifest and
generated files.
"""

from boxtools.core.models.manifest import Manifest, ToolRecord  # noqa: F401
from boxtools.core.models.template import GeneratedFile  # noqa: F401
from boxtools.core.models.tool import BoxConfig, Tool  # noqa: F401
