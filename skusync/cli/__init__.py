"""Command line entry point (`skusync` / `python -m skusync.cli`)."""

from .__main__ import EXIT_FATAL, EXIT_FINDINGS, EXIT_SUCCESS, main

__all__ = [
    "EXIT_FATAL",
    "EXIT_FINDINGS",
    "EXIT_SUCCESS",
    "main",
]
