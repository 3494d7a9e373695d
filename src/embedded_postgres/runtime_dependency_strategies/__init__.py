"""
Pluggable strategies of the acquisition pipeline.

This package handles:
1. Locating cached archives (CacheLocator)
2. Fetching archives from a remote repository (RemoteFetchStrategy)
3. Extracting archives into a runtime directory (ArchiveUnpacker)
"""

from .cache_locator import CacheLocator, DefaultCacheLocator
from .remote_fetch import MavenRemoteFetchStrategy, RemoteFetchStrategy
from .unpacker import ArchiveUnpacker, TarXzUnpacker

__all__ = [
    "ArchiveUnpacker",
    "CacheLocator",
    "DefaultCacheLocator",
    "MavenRemoteFetchStrategy",
    "RemoteFetchStrategy",
    "TarXzUnpacker",
]
