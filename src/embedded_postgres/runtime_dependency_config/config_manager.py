"""
Acquisition planning.

Turns a RuntimeConfig into a concrete plan: the validated version, where
its archive is cached, which runtime directory it unpacks into, and which
of the fetch and unpack steps still have to run.
"""

import pathlib
from typing import Optional

from embedded_postgres.embedded_postgres_config import RuntimeConfig
from embedded_postgres.embedded_postgres_utils import PlatformUtils
from embedded_postgres.runtime_dependency_models import load_binaries_config

RUNTIME_MARKER_NAME = ".embedded_postgres"


class AcquisitionStatus:
    """Enumeration of acquisition statuses."""

    PENDING = "pending"
    FETCHING = "fetching"
    UNPACKING = "unpacking"
    READY = "ready"
    FAILED = "failed"


def runtime_marker(runtime_path: pathlib.Path) -> pathlib.Path:
    """
    Returns the marker file written once a runtime has been completely unpacked.
    It holds the version of the runtime and is never part of an archive.
    """
    return runtime_path / RUNTIME_MARKER_NAME


def runtime_executable(runtime_path: pathlib.Path) -> pathlib.Path:
    """
    Returns the pg_ctl binary an unpacked runtime must contain.
    """
    executable = "pg_ctl.exe" if PlatformUtils.is_windows() else "pg_ctl"
    return runtime_path / "bin" / executable


def unpacked_version(runtime_path: pathlib.Path) -> Optional[str]:
    """
    Returns the version recorded in the runtime marker, or None when the
    directory holds no completely unpacked runtime.
    """
    try:
        return runtime_marker(runtime_path).read_text().strip() or None
    except FileNotFoundError:
        return None


class AcquisitionPlan:
    """
    A plan to make one Postgres version available in one runtime directory.
    """

    def __init__(
        self,
        version: str,
        archive_path: pathlib.Path,
        runtime_path: pathlib.Path,
        needs_fetch: bool,
        needs_unpack: bool,
        status: str = AcquisitionStatus.PENDING,
    ):
        """
        Initialize an acquisition plan.

        Args:
            version: Validated Postgres version
            archive_path: Where the archive for the version is cached
            runtime_path: Directory the archive is unpacked into
            needs_fetch: Whether the archive is missing from the cache
            needs_unpack: Whether the runtime directory lacks a complete runtime of this version
            status: Current acquisition status
        """
        self.version = version
        self.archive_path = archive_path
        self.runtime_path = runtime_path
        self.needs_fetch = needs_fetch
        self.needs_unpack = needs_unpack
        self.status = status
        self.error_message: Optional[str] = None

    @property
    def marker_path(self) -> pathlib.Path:
        return runtime_marker(self.runtime_path)

    @property
    def executable_path(self) -> pathlib.Path:
        return runtime_executable(self.runtime_path)

    def is_ready(self) -> bool:
        """Check if the plan has been executed successfully."""
        return self.status == AcquisitionStatus.READY

    def __repr__(self) -> str:
        return (
            f"AcquisitionPlan(version={self.version}, status={self.status}, "
            f"archive={self.archive_path}, runtime={self.runtime_path})"
        )


class AcquisitionPlanner:
    """
    Builds acquisition plans. Validation happens first, so an unsupported
    version is rejected before the filesystem is touched.
    """

    def create_plan(self, config: RuntimeConfig) -> AcquisitionPlan:
        """
        Args:
            config: The runtime configuration to plan for

        Returns:
            AcquisitionPlan describing the remaining work

        Raises:
            UnsupportedVersionError: if config.version is not supported
        """
        version = load_binaries_config().require_supported(config.version)

        archive_path = pathlib.Path(config.cache_locator_or_default().locate(version))
        runtime_path = config.resolved_runtime_path()

        return AcquisitionPlan(
            version=version,
            archive_path=archive_path,
            runtime_path=runtime_path,
            needs_fetch=not archive_path.is_file(),
            needs_unpack=unpacked_version(runtime_path) != version,
        )
