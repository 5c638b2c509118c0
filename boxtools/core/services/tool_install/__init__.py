"""
Tool installation service — project-local installs with ownership tracking.

Layers (each a sub-package, lower layers never import higher ones):

    data           L0  layout constants and the installer recipe table
    domain         L1  pure logic: ownership diff, path containment
    detection      L3  read-only filesystem probes: snapshots, binary lookup
    execution      L4  writes: subprocess runner, sandbox, linker, installers
    orchestration  L5  install / uninstall / list coordinators

Import from the layer module directly, e.g.::

    from boxtools.core.services.tool_install.orchestration import install_tool
"""
