"""
Remote fetch strategies retrieve the archive of a Postgres version into the cache.
"""

import logging
import os
import pathlib
import shutil
import tempfile
import zipfile
from abc import ABC, abstractmethod
from typing import Optional, Union

from embedded_postgres.embedded_postgres_exceptions import (
    EmbeddedPostgresException,
    FetchFailedError,
)
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger
from embedded_postgres.embedded_postgres_settings import EmbeddedPostgresSettings
from embedded_postgres.embedded_postgres_utils import FileUtils, PlatformId, PlatformUtils
from embedded_postgres.runtime_dependency_models import load_binaries_config


class RemoteFetchStrategy(ABC):
    """
    Retrieves the archive for a version into a destination path.

    Implementations must make the destination appear atomically: readers
    either see no file or the complete archive. A destination that already
    exists when the fetch completes is treated as success. Failures are
    reported, never retried.
    """

    @abstractmethod
    def fetch(self, version: str, destination: pathlib.Path) -> None:
        """
        Retrieve the archive for version into destination.

        Args:
            version: A supported Postgres version
            destination: Path the complete archive must appear at

        Raises:
            FetchFailedError: the archive could not be retrieved
        """
        ...


class MavenRemoteFetchStrategy(RemoteFetchStrategy):
    """
    Downloads the platform jar from a Maven repository and copies the .txz
    archive it wraps into the destination.
    """

    def __init__(
        self,
        repository_url: Optional[str] = None,
        platform_id: Optional[PlatformId] = None,
        logger: Optional[EmbeddedPostgresLogger] = None,
        verify_checksum: bool = True,
    ):
        """
        Args:
            repository_url: Maven repository root. Defaults to the
                EMBEDDED_POSTGRES_REPOSITORY_URL environment variable, then
                to the repository in postgres_binaries.json
            platform_id: Platform to fetch binaries for. Defaults to the current one
            logger: Logger for progress and error messages
            verify_checksum: Compare the jar against the repository's .sha256 digest
        """
        self.repository_url = repository_url
        self.platform_id = platform_id
        self.logger = logger or EmbeddedPostgresLogger()
        self.verify_checksum = verify_checksum

    def jar_url(self, version: str) -> str:
        binaries = load_binaries_config()
        coordinates = binaries.coordinates_for(self.platform_id or PlatformUtils.get_platform_id())
        repository = self.repository_url or EmbeddedPostgresSettings.get_repository_url_override()
        return binaries.jar_url(version, coordinates, repository)

    def fetch(self, version: str, destination: Union[str, pathlib.Path]) -> None:
        destination = pathlib.Path(destination)
        try:
            url = self.jar_url(version)
            destination.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryDirectory(dir=destination.parent, prefix=".fetch-") as work_dir:
                jar_path = FileUtils.download_file(
                    self.logger, url, pathlib.Path(work_dir) / "binaries.jar"
                )
                if self.verify_checksum:
                    self._verify_checksum(url, jar_path)
                self._extract_archive_from_jar(jar_path, destination)
        except FetchFailedError:
            raise
        except (EmbeddedPostgresException, zipfile.BadZipFile, OSError) as exc:
            self.logger.log(f"Failed to fetch postgres {version}: {exc}", logging.ERROR)
            raise FetchFailedError(version, destination, str(exc)) from exc

    def _verify_checksum(self, url: str, jar_path: pathlib.Path) -> None:
        published = FileUtils.fetch_text(self.logger, url + ".sha256")
        if published is None:
            self.logger.log(f"No checksum published for {url}, skipping verification", logging.WARNING)
            return
        expected = published.strip().split()[0].lower() if published.strip() else ""
        actual = FileUtils.sha256_of_file(jar_path)
        if expected != actual:
            raise EmbeddedPostgresException(
                f"checksum mismatch for {url}: expected {expected}, got {actual}"
            )
        self.logger.log(f"Verified checksum of {url}", logging.INFO)

    def _extract_archive_from_jar(self, jar_path: pathlib.Path, destination: pathlib.Path) -> None:
        with zipfile.ZipFile(jar_path) as jar:
            archives = [name for name in jar.namelist() if name.endswith(".txz")]
            if len(archives) != 1:
                raise EmbeddedPostgresException(
                    f"expected exactly one .txz archive in {jar_path.name}, found {len(archives)}"
                )
            tmp_path = FileUtils.temporary_sibling(destination)
            try:
                with jar.open(archives[0]) as src, open(tmp_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                if destination.exists():
                    self.logger.log(f"{destination} was populated concurrently, keeping it", logging.INFO)
                    return
                os.replace(tmp_path, destination)
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()
        self.logger.log(f"Cached postgres archive at {destination}", logging.INFO)
