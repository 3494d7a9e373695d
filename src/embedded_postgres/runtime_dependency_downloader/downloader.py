"""
Acquisition pipeline implementation.

Fetches and unpacks the Postgres runtime described by a RuntimeConfig.
"""

import dataclasses
import datetime
import logging
import os
import pathlib
from typing import Any, Optional

from embedded_postgres.embedded_postgres_config import RuntimeConfig
from embedded_postgres.embedded_postgres_exceptions import (
    EmbeddedPostgresException,
    ExtractionFailedError,
    FetchFailedError,
)
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger
from embedded_postgres.embedded_postgres_utils import FileUtils, PlatformUtils
from embedded_postgres.runtime_dependency_config import (
    AcquisitionPlan,
    AcquisitionPlanner,
    AcquisitionStatus,
    unpacked_version,
)


@dataclasses.dataclass(frozen=True)
class RuntimePaths:
    """
    Everything the process manager needs to initialise, start and supervise
    the provisioned Postgres instance.
    """

    runtime_path: pathlib.Path
    data_path: pathlib.Path
    binaries_path: pathlib.Path
    postgres_path: pathlib.Path
    pg_ctl_path: pathlib.Path
    initdb_path: pathlib.Path
    port: int
    database: str
    username: str
    password: str
    locale: Optional[str]
    start_timeout: datetime.timedelta
    output: Any


class AcquisitionPipeline:
    """
    Makes a Postgres runtime directory available.

    Resolves the cached archive, fetches it when missing, unpacks it when
    the runtime directory has no usable runtime, and returns the directory.
    Errors are raised to the caller; nothing is retried.
    """

    def __init__(self, logger: Optional[EmbeddedPostgresLogger] = None):
        """
        Args:
            logger: Logger for progress and error messages
        """
        self.logger = logger or EmbeddedPostgresLogger()
        self.planner = AcquisitionPlanner()

    def plan(self, config: RuntimeConfig) -> AcquisitionPlan:
        """
        Plan the acquisition for config without executing it.

        Raises:
            UnsupportedVersionError: version is not supported, raised before any I/O
        """
        return self.planner.create_plan(config)

    def execute(self, plan: AcquisitionPlan, config: RuntimeConfig) -> pathlib.Path:
        """
        Execute a plan created by plan(config).

        The plan's status follows the work: fetching, unpacking, then ready,
        or failed with error_message set when an error is raised.

        Args:
            plan: The plan to execute
            config: The configuration the plan was created from, supplying the strategies

        Returns:
            The runtime directory

        Raises:
            FetchFailedError: the archive could not be obtained
            ExtractionFailedError: the archive could not be unpacked
        """
        try:
            if plan.needs_fetch:
                self._fetch(config, plan)
            else:
                self.logger.log(f"Using cached postgres {plan.version} at {plan.archive_path}", logging.INFO)

            if plan.needs_unpack:
                self._unpack(config, plan)
            else:
                self.logger.log(f"Reusing postgres runtime at {plan.runtime_path}", logging.INFO)
        except EmbeddedPostgresException as exc:
            plan.status = AcquisitionStatus.FAILED
            plan.error_message = str(exc)
            raise

        plan.status = AcquisitionStatus.READY
        return plan.runtime_path

    def ensure(self, config: RuntimeConfig) -> pathlib.Path:
        """
        Ensure the runtime for config is unpacked.

        Calling it again with the same configuration fetches and unpacks
        nothing once the cache and the runtime directory are populated.

        Returns:
            The runtime directory

        Raises:
            UnsupportedVersionError: version is not supported, raised before any I/O
            FetchFailedError: the archive could not be obtained
            ExtractionFailedError: the archive could not be unpacked
        """
        return self.execute(self.plan(config), config)

    def prepare(self, config: RuntimeConfig) -> RuntimePaths:
        """
        Ensure the runtime for config and describe it for the process manager.
        """
        runtime_path = self.ensure(config)
        binaries_path = runtime_path / "bin"
        suffix = ".exe" if PlatformUtils.is_windows() else ""
        return RuntimePaths(
            runtime_path=runtime_path,
            data_path=config.data_path if config.data_path is not None else runtime_path,
            binaries_path=binaries_path,
            postgres_path=binaries_path / f"postgres{suffix}",
            pg_ctl_path=binaries_path / f"pg_ctl{suffix}",
            initdb_path=binaries_path / f"initdb{suffix}",
            port=config.port,
            database=config.database,
            username=config.username,
            password=config.password,
            locale=config.locale,
            start_timeout=config.start_timeout,
            output=config.output,
        )

    def _fetch(self, config: RuntimeConfig, plan: AcquisitionPlan) -> None:
        plan.status = AcquisitionStatus.FETCHING
        self.logger.log(f"Fetching postgres {plan.version} into {plan.archive_path}", logging.INFO)
        strategy = config.remote_fetch_strategy_or_default(self.logger)
        try:
            strategy.fetch(plan.version, plan.archive_path)
        except FetchFailedError:
            raise
        except Exception as exc:
            self.logger.log(f"Fetching postgres {plan.version} failed: {exc}", logging.ERROR)
            raise FetchFailedError(plan.version, plan.archive_path, str(exc)) from exc

        if not plan.archive_path.is_file():
            raise FetchFailedError(
                plan.version, plan.archive_path, "fetch completed but no archive was written"
            )

    def _unpack(self, config: RuntimeConfig, plan: AcquisitionPlan) -> None:
        plan.status = AcquisitionStatus.UNPACKING
        previous_version = unpacked_version(plan.runtime_path)
        if previous_version is not None:
            self.logger.log(
                f"Replacing postgres {previous_version} runtime at {plan.runtime_path} with {plan.version}",
                logging.INFO,
            )
        self.logger.log(f"Unpacking {plan.archive_path} into {plan.runtime_path}", logging.INFO)
        unpacker = config.unpacker_or_default(self.logger)
        try:
            # the marker only exists while the directory holds a complete runtime
            plan.marker_path.unlink(missing_ok=True)
            unpacker.unpack(plan.archive_path, plan.runtime_path)
        except ExtractionFailedError:
            raise
        except Exception as exc:
            self.logger.log(f"Unpacking {plan.archive_path} failed: {exc}", logging.ERROR)
            raise ExtractionFailedError(plan.archive_path, plan.runtime_path, str(exc)) from exc

        if not plan.executable_path.exists():
            raise ExtractionFailedError(
                plan.archive_path,
                plan.runtime_path,
                f"{plan.executable_path.relative_to(plan.runtime_path)} missing after extraction",
            )

        tmp_marker = FileUtils.temporary_sibling(plan.marker_path)
        try:
            tmp_marker.write_text(plan.version)
            os.replace(tmp_marker, plan.marker_path)
        except OSError as exc:
            raise ExtractionFailedError(
                plan.archive_path, plan.runtime_path, f"unable to write runtime marker: {exc}"
            ) from exc
        finally:
            if tmp_marker.exists():
                tmp_marker.unlink()


def ensure(config: RuntimeConfig, logger: Optional[EmbeddedPostgresLogger] = None) -> pathlib.Path:
    """
    Shorthand for AcquisitionPipeline(logger).ensure(config).
    """
    return AcquisitionPipeline(logger).ensure(config)
