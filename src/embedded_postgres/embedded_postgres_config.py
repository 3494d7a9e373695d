"""
Configuration parameters for an embedded Postgres instance.
"""

import datetime
import os
import pathlib
import sys
import tempfile
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from embedded_postgres.embedded_postgres_exceptions import PathResolutionError
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger
from embedded_postgres.runtime_dependency_models import latest_version
from embedded_postgres.runtime_dependency_strategies import (
    ArchiveUnpacker,
    CacheLocator,
    DefaultCacheLocator,
    MavenRemoteFetchStrategy,
    RemoteFetchStrategy,
    TarXzUnpacker,
)

PathLike = Union[str, os.PathLike]


def resolve_path(path: PathLike) -> pathlib.Path:
    """
    Resolves a relative path against the current working directory.

    Raises:
        PathResolutionError: if the working directory cannot be read
    """
    path = pathlib.Path(path)
    if path.is_absolute():
        return path
    try:
        cwd = os.getcwd()
    except OSError as exc:
        raise PathResolutionError(path, str(exc)) from exc
    return pathlib.Path(os.path.normpath(os.path.join(cwd, path)))


class RuntimeConfig(BaseModel):
    """
    Runtime configuration of the Postgres instance to provision.

    Instances are immutable. Every with_* method returns a new configuration
    with exactly one field changed, so a base configuration can be shared
    and specialised freely:

        base = RuntimeConfig().with_version("12.6.0")
        first = base.with_port(5433).with_runtime_path("pg/first")
        second = base.with_port(5434).with_runtime_path("pg/second")

    The defaults are version: latest supported, port: 5432, database,
    username and password: "postgres", start timeout: 15 seconds, output:
    standard output. Unset strategies fall back to DefaultCacheLocator,
    MavenRemoteFetchStrategy and TarXzUnpacker.

    The version is not validated here; the acquisition pipeline rejects
    unsupported versions when it runs.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    version: str = Field(default_factory=latest_version)
    port: int = Field(5432, ge=0, le=65535)
    database: str = "postgres"
    username: str = "postgres"
    password: str = "postgres"
    runtime_path: Optional[pathlib.Path] = None
    data_path: Optional[pathlib.Path] = None
    locale: Optional[str] = None
    start_timeout: datetime.timedelta = datetime.timedelta(seconds=15)
    output: Any = Field(default_factory=lambda: sys.stdout)
    cache_locator: Optional[CacheLocator] = None
    remote_fetch_strategy: Optional[RemoteFetchStrategy] = None
    unpacker: Optional[ArchiveUnpacker] = None

    @field_validator("runtime_path", "data_path", mode="before")
    @classmethod
    def _resolve_relative_path(cls, value: Optional[PathLike]) -> Optional[pathlib.Path]:
        # Relative paths are bound to the working directory at build time
        if value is None:
            return None
        return resolve_path(value)

    def _replace(self, **changes: Any) -> "RuntimeConfig":
        values = dict(self)
        values.update(changes)
        return type(self)(**values)

    def with_version(self, version: str) -> "RuntimeConfig":
        """Sets the Postgres binary version, e.g. "12.6.0"."""
        return self._replace(version=version)

    def with_port(self, port: int) -> "RuntimeConfig":
        """Sets the port Postgres will listen on."""
        return self._replace(port=port)

    def with_database(self, database: str) -> "RuntimeConfig":
        """Sets the name of the database that will be created."""
        return self._replace(database=database)

    def with_username(self, username: str) -> "RuntimeConfig":
        """Sets the username that will be used to connect."""
        return self._replace(username=username)

    def with_password(self, password: str) -> "RuntimeConfig":
        """Sets the password that will be used to connect."""
        return self._replace(password=password)

    def with_runtime_path(self, path: PathLike) -> "RuntimeConfig":
        """
        Sets the directory the Postgres runtime is extracted into. When no data
        path is set it doubles as the data directory, so reusing it reuses a
        previously initialised database.
        """
        return self._replace(runtime_path=resolve_path(path))

    def with_data_path(self, path: PathLike) -> "RuntimeConfig":
        """Sets the Postgres data directory."""
        return self._replace(data_path=resolve_path(path))

    def with_locale(self, locale: str) -> "RuntimeConfig":
        """Sets the default locale passed to initdb."""
        return self._replace(locale=locale)

    def with_start_timeout(self, timeout: Union[datetime.timedelta, float]) -> "RuntimeConfig":
        """Sets how long the process manager may wait for Postgres to start, in seconds or as a timedelta."""
        return self._replace(start_timeout=timeout)

    def with_output(self, output: Any) -> "RuntimeConfig":
        """Sets the stream Postgres process output is written to."""
        return self._replace(output=output)

    def with_cache_locator(self, cache_locator: CacheLocator) -> "RuntimeConfig":
        """Sets the strategy locating cached archives, replacing DefaultCacheLocator."""
        return self._replace(cache_locator=cache_locator)

    def with_remote_fetch_strategy(self, strategy: RemoteFetchStrategy) -> "RuntimeConfig":
        """Sets the strategy fetching missing archives, replacing MavenRemoteFetchStrategy."""
        return self._replace(remote_fetch_strategy=strategy)

    def with_unpacker(self, unpacker: ArchiveUnpacker) -> "RuntimeConfig":
        """Sets the strategy extracting archives, replacing TarXzUnpacker."""
        return self._replace(unpacker=unpacker)

    def resolved_runtime_path(self) -> pathlib.Path:
        """
        Returns the runtime path, or an ephemeral directory under the system
        temp dir keyed by process, port and version.
        """
        if self.runtime_path is not None:
            return self.runtime_path
        return (
            pathlib.Path(tempfile.gettempdir())
            / "embedded_postgres"
            / f"{os.getpid()}-{self.port}-{self.version}"
        )

    def resolved_data_path(self) -> pathlib.Path:
        """Returns the data path, falling back to the resolved runtime path."""
        if self.data_path is not None:
            return self.data_path
        return self.resolved_runtime_path()

    def cache_locator_or_default(self) -> CacheLocator:
        return self.cache_locator or DefaultCacheLocator()

    def remote_fetch_strategy_or_default(
        self, logger: Optional[EmbeddedPostgresLogger] = None
    ) -> RemoteFetchStrategy:
        return self.remote_fetch_strategy or MavenRemoteFetchStrategy(logger=logger)

    def unpacker_or_default(self, logger: Optional[EmbeddedPostgresLogger] = None) -> ArchiveUnpacker:
        return self.unpacker or TarXzUnpacker(logger=logger)
