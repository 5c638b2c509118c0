"""
Generators — produce project files from box.yml.

Each generator module exposes a ``generate_*()`` function that returns
a ``GeneratedFile``; nothing is written until the caller does so.
"""
