"""
Utilities package for bezelgen.

Exports shared helpers for logging and the terminal status writer.
Keep this package lightweight and free of domain-specific logic.
"""

from bezelgen.utils.console import ConsoleWriter, StatusWriter
from bezelgen.utils.logging import configure_logging, get_logger, rotate_log_file

__all__ = [
    "ConsoleWriter",
    "StatusWriter",
    "configure_logging",
    "get_logger",
    "rotate_log_file",
]
