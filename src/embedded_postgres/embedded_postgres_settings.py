"""
Defines the default locations used by embedded_postgres.
"""

import os
import pathlib

CACHE_DIR_ENV_VAR = "EMBEDDED_POSTGRES_CACHE_DIR"
REPOSITORY_URL_ENV_VAR = "EMBEDDED_POSTGRES_REPOSITORY_URL"


class EmbeddedPostgresSettings:
    """
    Provides the various settings for embedded_postgres. Every location can be
    overridden through the environment so tests stay hermetic.
    """

    @staticmethod
    def get_home_directory() -> pathlib.Path:
        """
        Returns the embedded_postgres home directory, ~/.embedded_postgres
        """
        return pathlib.Path.home() / ".embedded_postgres"

    @staticmethod
    def get_global_cache_directory() -> pathlib.Path:
        """
        Returns the directory holding downloaded archives, shared by every process of the user.
        """
        override = os.environ.get(CACHE_DIR_ENV_VAR)
        if override:
            return pathlib.Path(override).expanduser()
        return EmbeddedPostgresSettings.get_home_directory() / "cache"

    @staticmethod
    def get_repository_url_override():
        """
        Returns the Maven repository configured in the environment, if any.
        """
        override = os.environ.get(REPOSITORY_URL_ENV_VAR)
        return override.rstrip("/") if override else None
