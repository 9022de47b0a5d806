"""
Process execution helper.

Commands run from an argument vector (never through a shell); stdout is
captured and returned stripped. Anything other than a clean zero exit raises
`CommandError` carrying the captured output.
"""

from __future__ import annotations

import subprocess
from typing import Optional, Protocol, Sequence

from bezelgen.errors import CommandError


class CommandRunner(Protocol):
    def __call__(
        self,
        executable: str,
        arguments: Sequence[str],
        merge_stderr: bool = False,
        timeout: Optional[float] = None,
    ) -> str: ...


def run_command(
    executable: str,
    arguments: Sequence[str],
    merge_stderr: bool = False,
    timeout: Optional[float] = None,
) -> str:
    """
    Run `executable` with `arguments` and return its stripped stdout.

    Parameters
    ----------
    merge_stderr : bool
        Capture stderr into the same stream as stdout (used for build logs).
        Otherwise stderr passes through to the terminal.
    timeout : float | None
        Seconds before the process is killed and `CommandError` raised.
    """
    command = [executable, *arguments]
    try:
        completed = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else None,
            text=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        output = exc.stdout if isinstance(exc.stdout, str) else ""
        raise CommandError(command, output=output, reason=f"timed out after {timeout}s") from exc
    except OSError as exc:
        raise CommandError(command, reason=str(exc)) from exc

    output = completed.stdout or ""
    if completed.returncode != 0:
        raise CommandError(command, returncode=completed.returncode, output=output)
    return output.strip()


__all__ = ["CommandRunner", "run_command"]
