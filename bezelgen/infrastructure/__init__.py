"""
Infrastructure package for bezelgen.

Centralizes external tooling concerns: process execution, `xcrun simctl`
and `xcodebuild`. Keep this layer focused on I/O and command contracts,
decoupled from lifecycle/orchestrator logic.
"""

from bezelgen.infrastructure.shell import run_command
from bezelgen.infrastructure.simctl import SimctlClient
from bezelgen.infrastructure.xcodebuild import XcodeBuilder

__all__ = [
    "SimctlClient",
    "XcodeBuilder",
    "run_command",
]
