"""Exception hierarchy for bezelgen."""

from __future__ import annotations

from typing import ClassVar, Optional, Sequence

from bezelgen.domain.models import FailureReason


class BezelGenError(Exception):
    """Base exception for bezelgen errors."""


class CommandError(BezelGenError):
    """An external command could not be launched or exited non-zero."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        output: str = "",
        reason: Optional[str] = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        joined = " ".join(self.command)
        if reason is not None:
            message = f"Failed to launch '{joined}': {reason}"
        else:
            message = f"Command exited with code {returncode}: {joined}"
        super().__init__(message)


class LifecycleError(BezelGenError):
    """
    A single work group failed somewhere in its simulator lifecycle.

    Caught at the lifecycle boundary and turned into the group's failure
    classification; never aborts sibling groups.
    """

    reason: ClassVar[FailureReason] = FailureReason.UNEXPECTED


class NoSupportedProfile(LifecycleError):
    reason = FailureReason.NO_SUPPORTED_PROFILE


class ProvisionFailed(LifecycleError):
    reason = FailureReason.PROVISION_FAILED


class BootFailed(LifecycleError):
    reason = FailureReason.BOOT_FAILED


class ProbeLaunchFailed(LifecycleError):
    reason = FailureReason.PROBE_LAUNCH_FAILED


class ResultUnavailable(LifecycleError):
    reason = FailureReason.RESULT_UNAVAILABLE


class FatalPipelineError(BezelGenError):
    """Aborts the whole run; nothing is written to disk."""


class PayloadBuildFailed(FatalPipelineError):
    pass


class RecordStoreLoadFailed(FatalPipelineError):
    pass


class RecordStoreWriteFailed(FatalPipelineError):
    pass


__all__ = [
    "BezelGenError",
    "BootFailed",
    "CommandError",
    "FatalPipelineError",
    "LifecycleError",
    "NoSupportedProfile",
    "PayloadBuildFailed",
    "ProbeLaunchFailed",
    "ProvisionFailed",
    "RecordStoreLoadFailed",
    "RecordStoreWriteFailed",
    "ResultUnavailable",
]
