"""
Acquisition planning.

This package handles:
1. Validating the requested version against the supported set
2. Locating the cached archive and the runtime directory
3. Deciding whether fetching and unpacking are still needed
"""

from .config_manager import (
    AcquisitionPlan,
    AcquisitionPlanner,
    AcquisitionStatus,
    runtime_executable,
    runtime_marker,
    unpacked_version,
)

__all__ = [
    "AcquisitionPlan",
    "AcquisitionPlanner",
    "AcquisitionStatus",
    "runtime_executable",
    "runtime_marker",
    "unpacked_version",
]
