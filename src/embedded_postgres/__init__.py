"""
embedded_postgres provisions a PostgreSQL runtime for a host program:
it resolves the binaries for a version, caches them, and unpacks them
into a runtime directory ready for a process manager to start.
"""

from embedded_postgres.embedded_postgres_config import RuntimeConfig
from embedded_postgres.embedded_postgres_exceptions import (
    EmbeddedPostgresException,
    ExtractionFailedError,
    FetchFailedError,
    PathResolutionError,
    UnsupportedVersionError,
)
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger
from embedded_postgres.runtime_dependency_downloader import AcquisitionPipeline, RuntimePaths, ensure
from embedded_postgres.runtime_dependency_models import latest_version, supported_versions
from embedded_postgres.runtime_dependency_strategies import (
    ArchiveUnpacker,
    CacheLocator,
    DefaultCacheLocator,
    MavenRemoteFetchStrategy,
    RemoteFetchStrategy,
    TarXzUnpacker,
)

__all__ = [
    "AcquisitionPipeline",
    "ArchiveUnpacker",
    "CacheLocator",
    "DefaultCacheLocator",
    "EmbeddedPostgresException",
    "EmbeddedPostgresLogger",
    "ExtractionFailedError",
    "FetchFailedError",
    "MavenRemoteFetchStrategy",
    "PathResolutionError",
    "RemoteFetchStrategy",
    "RuntimeConfig",
    "RuntimePaths",
    "TarXzUnpacker",
    "UnsupportedVersionError",
    "ensure",
    "latest_version",
    "supported_versions",
]
