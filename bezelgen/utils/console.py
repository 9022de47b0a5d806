"""
Status writer: the terminal-facing message channel.

Pipeline components never reach for a global logger. They receive a
`StatusWriter` and call its methods; `ConsoleWriter` renders coloured status
markers with rich and forwards each message to the `bezelgen` logger so the
session log file gets a copy.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text

_MARKERS = {
    "info": ("[i]", "bright_cyan"),
    "success": ("[✓]", "bright_green"),
    "warn": ("[!]", "bright_yellow"),
    "error": ("[✗]", "bright_red"),
}


@runtime_checkable
class StatusWriter(Protocol):
    """Write-only message sink handed to every pipeline component."""

    def info(self, message: str, indent: int = 0) -> None: ...

    def success(self, message: str, indent: int = 0) -> None: ...

    def warn(self, message: str, indent: int = 0) -> None: ...

    def error(self, message: str, indent: int = 0) -> None: ...

    def detail(self, message: str, indent: int = 0) -> None:
        """Dim secondary line. The caller supplies any `- ` prefix."""
        ...

    def banner(self, message: str) -> None: ...

    def summary(self, message: str) -> None:
        """End-of-run result line; shown even when not verbose."""
        ...


class ConsoleWriter:
    """
    Rich-backed `StatusWriter`.

    Warnings and errors always print (to stderr) and the run summary always
    prints; everything else is hidden unless `verbose`. Every message is also
    logged, regardless of verbosity.
    """

    def __init__(
        self,
        verbose: bool = True,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.verbose = verbose
        self._console = console or Console(highlight=False)
        self._err_console = err_console or Console(stderr=True, highlight=False)
        self._logger = logger or logging.getLogger("bezelgen")

    def _marked(self, kind: str, message: str, indent: int) -> Text:
        marker, style = _MARKERS[kind]
        return Text.assemble(" " * indent, (marker, style), " ", message)

    def info(self, message: str, indent: int = 0) -> None:
        self._logger.info(message)
        if self.verbose:
            self._console.print(self._marked("info", message, indent))

    def success(self, message: str, indent: int = 0) -> None:
        self._logger.info(message)
        if self.verbose:
            self._console.print(self._marked("success", message, indent))

    def warn(self, message: str, indent: int = 0) -> None:
        self._logger.warning(message)
        self._err_console.print(self._marked("warn", message, indent))

    def error(self, message: str, indent: int = 0) -> None:
        self._logger.error(message)
        self._err_console.print(self._marked("error", message, indent))

    def detail(self, message: str, indent: int = 0) -> None:
        self._logger.debug(message.strip())
        if self.verbose:
            self._console.print(Text(" " * indent + message, style="dim"))

    def banner(self, message: str) -> None:
        self._logger.info(message)
        if self.verbose:
            self._console.print()
            self._console.print(Text(f" {message} ", style="bold bright_white on blue"))
            self._console.print()

    def summary(self, message: str) -> None:
        self._logger.info(message)
        self._console.print(Text(message, style="bold"))


__all__ = ["ConsoleWriter", "StatusWriter"]
