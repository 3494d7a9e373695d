"""
Runtime acquisition.

This package handles:
1. Fetching Postgres archives into the cache
2. Unpacking them into runtime directories
3. Describing the result for the process manager
"""

from .downloader import AcquisitionPipeline, RuntimePaths, ensure

__all__ = ["AcquisitionPipeline", "RuntimePaths", "ensure"]
