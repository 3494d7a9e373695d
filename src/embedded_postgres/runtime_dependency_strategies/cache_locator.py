"""
Cache locators map a Postgres version onto the local path of its archive.
"""

import pathlib
from abc import ABC, abstractmethod
from typing import Optional, Union

from embedded_postgres.embedded_postgres_settings import EmbeddedPostgresSettings
from embedded_postgres.embedded_postgres_utils import PlatformId, PlatformUtils
from embedded_postgres.runtime_dependency_models import load_binaries_config


class CacheLocator(ABC):
    """
    Produces the expected location of the cached archive for a version.

    Implementations must be pure: the same version always yields the same
    path, and no I/O happens beyond building it. Whether the file exists is
    for the caller to check.
    """

    @abstractmethod
    def locate(self, version: str) -> pathlib.Path:
        """
        Args:
            version: A supported Postgres version, e.g. "12.6.0"

        Returns:
            Path the archive for version is, or will be, cached at
        """
        ...


class DefaultCacheLocator(CacheLocator):
    """
    Lays archives out as <cache-root>/<version>/<archive-name>.

    When cache_root is not given, it is taken from
    EmbeddedPostgresSettings.get_global_cache_directory() on each call, so the
    EMBEDDED_POSTGRES_CACHE_DIR override is honoured.
    """

    def __init__(
        self,
        cache_root: Optional[Union[str, pathlib.Path]] = None,
        platform_id: Optional[PlatformId] = None,
    ):
        self.cache_root = pathlib.Path(cache_root) if cache_root is not None else None
        self.platform_id = platform_id

    def locate(self, version: str) -> pathlib.Path:
        binaries = load_binaries_config()
        platform_id = self.platform_id or PlatformUtils.get_platform_id()
        coordinates = binaries.coordinates_for(platform_id)
        root = self.cache_root or EmbeddedPostgresSettings.get_global_cache_directory()
        return root / version / binaries.archive_name(version, coordinates)

    def __repr__(self) -> str:
        return f"DefaultCacheLocator(cache_root={self.cache_root}, platform_id={self.platform_id})"
