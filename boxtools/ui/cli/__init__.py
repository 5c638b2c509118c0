"""
CLI sub-command groups registered by ``boxtools.main``.
"""
