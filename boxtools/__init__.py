"""box — project-local developer tool manager."""

__version__ = "0.1.0"
