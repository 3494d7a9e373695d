"""
This module contains the exceptions raised by the embedded_postgres framework.
"""

import pathlib
from typing import Union


class EmbeddedPostgresException(Exception):
    """
    Base class for all exceptions raised while provisioning an embedded Postgres runtime.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class UnsupportedVersionError(EmbeddedPostgresException):
    """
    Raised when the requested Postgres version is not part of the supported set.
    """

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"unsupported postgres version {version!r}")


class FetchFailedError(EmbeddedPostgresException):
    """
    Raised when the remote archive for a version could not be obtained.
    """

    def __init__(self, version: str, destination: Union[str, pathlib.Path], reason: str = ""):
        self.version = version
        self.destination = str(destination)
        self.reason = reason
        message = f"unable to fetch postgres {version} to {self.destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ExtractionFailedError(EmbeddedPostgresException):
    """
    Raised when a cached archive could not be unpacked into the runtime directory.
    """

    def __init__(
        self,
        source: Union[str, pathlib.Path],
        destination: Union[str, pathlib.Path],
        reason: str = "",
    ):
        self.source = str(source)
        self.destination = str(destination)
        self.reason = reason
        message = f"unable to extract postgres archive {self.source} to {self.destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PathResolutionError(EmbeddedPostgresException):
    """
    Raised when a relative path cannot be resolved against the working directory.
    """

    def __init__(self, path: Union[str, pathlib.Path], reason: str = ""):
        self.path = str(path)
        message = f"unable to resolve path {self.path!r} against the working directory"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
