"""
Pydantic data models for postgres_binaries.json.

The file is the single table of supported Postgres releases and of the Maven
coordinates their binaries are published under. New releases are added to
the table; nothing else needs to change.
"""

import functools
import json
import pathlib
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from embedded_postgres.embedded_postgres_exceptions import (
    EmbeddedPostgresException,
    UnsupportedVersionError,
)
from embedded_postgres.embedded_postgres_utils import PlatformId

BINARIES_TABLE_PATH = pathlib.Path(__file__).parent / "postgres_binaries.json"


class PlatformCoordinates(BaseModel):
    """
    The os/arch pair used in the Maven artifact id of a platform's binaries.
    """

    os: str = Field(..., description="Operating system part of the artifact id")
    arch: str = Field(..., description="Architecture part of the artifact id")

    model_config = ConfigDict(frozen=True)

    @property
    def classifier(self) -> str:
        return f"{self.os}-{self.arch}"


class PostgresBinariesConfig(BaseModel):
    """
    Complete binaries table.

    Structure:
    {
      "_description": "...",
      "latest": "13.2.0",
      "repository": "https://...",
      "groupPath": "io/zonky/test/postgres",
      "artifactPrefix": "embedded-postgres-binaries",
      "archiveType": "txz",
      "versions": ["13.2.0", ...],
      "platforms": {"linux-x64": {"os": "linux", "arch": "amd64"}, ...}
    }
    """

    description: Optional[str] = Field(None, alias="_description")
    latest: str
    repository: str
    group_path: str = Field(..., alias="groupPath")
    artifact_prefix: str = Field(..., alias="artifactPrefix")
    archive_type: str = Field(..., alias="archiveType")
    versions: List[str]
    platforms: Dict[str, PlatformCoordinates]

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def is_supported(self, version: str) -> bool:
        return version in self.versions

    def require_supported(self, version: str) -> str:
        """
        Returns the version unchanged, or raises UnsupportedVersionError.
        """
        if not self.is_supported(version):
            raise UnsupportedVersionError(version)
        return version

    def coordinates_for(self, platform_id: PlatformId) -> PlatformCoordinates:
        """
        Returns the Maven os/arch pair for a platform.

        Raises:
            EmbeddedPostgresException: if no binaries are published for the platform
        """
        coordinates = self.platforms.get(platform_id.value)
        if coordinates is None:
            raise EmbeddedPostgresException(
                f"No postgres binaries are published for platform {platform_id.value}"
            )
        return coordinates

    def artifact_id(self, coordinates: PlatformCoordinates) -> str:
        return f"{self.artifact_prefix}-{coordinates.classifier}"

    def archive_name(self, version: str, coordinates: PlatformCoordinates) -> str:
        """
        e.g. embedded-postgres-binaries-linux-amd64-13.2.0.txz
        """
        return f"{self.artifact_id(coordinates)}-{version}.{self.archive_type}"

    def jar_url(self, version: str, coordinates: PlatformCoordinates, repository: Optional[str] = None) -> str:
        """
        Returns the Maven URL of the jar wrapping the archive.
        """
        repository = (repository or self.repository).rstrip("/")
        artifact_id = self.artifact_id(coordinates)
        return f"{repository}/{self.group_path}/{artifact_id}/{version}/{artifact_id}-{version}.jar"


@functools.lru_cache(maxsize=1)
def load_binaries_config() -> PostgresBinariesConfig:
    """
    Loads the packaged binaries table. The result is cached for the life of the process.
    """
    with open(BINARIES_TABLE_PATH, "r") as f:
        return PostgresBinariesConfig(**json.load(f))


def supported_versions() -> List[str]:
    return list(load_binaries_config().versions)


def latest_version() -> str:
    return load_binaries_config().latest
