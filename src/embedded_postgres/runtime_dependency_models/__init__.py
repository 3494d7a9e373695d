"""
Runtime dependency models for embedded_postgres.

This package provides Pydantic data models for the table of supported
Postgres releases and the Maven coordinates their binaries are published under.
"""

from .postgres_binaries import (
    PlatformCoordinates,
    PostgresBinariesConfig,
    latest_version,
    load_binaries_config,
    supported_versions,
)

__all__ = [
    "PlatformCoordinates",
    "PostgresBinariesConfig",
    "latest_version",
    "load_binaries_config",
    "supported_versions",
]
