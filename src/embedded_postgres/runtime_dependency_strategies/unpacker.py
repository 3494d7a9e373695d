"""
Unpackers extract a cached archive into a runtime directory.
"""

import logging
import lzma
import pathlib
import tarfile
from abc import ABC, abstractmethod
from typing import Optional, Union

from embedded_postgres.embedded_postgres_exceptions import ExtractionFailedError
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger


class ArchiveUnpacker(ABC):
    """
    Extracts every entry of an archive into a destination directory, creating
    it if needed and preserving relative structure and permission bits.
    A failure must raise ExtractionFailedError; a partially extracted
    destination is acceptable but is never reported as success.
    """

    @abstractmethod
    def unpack(self, source: pathlib.Path, destination: pathlib.Path) -> None:
        """
        Extract every entry of source into destination.

        Args:
            source: The cached archive
            destination: The runtime directory, created if absent

        Raises:
            ExtractionFailedError: extraction could not complete
        """
        ...


class TarXzUnpacker(ArchiveUnpacker):
    """
    Unpacks the xz-compressed tarballs Postgres binaries are distributed as.
    """

    def __init__(self, logger: Optional[EmbeddedPostgresLogger] = None):
        self.logger = logger or EmbeddedPostgresLogger()

    def unpack(self, source: Union[str, pathlib.Path], destination: Union[str, pathlib.Path]) -> None:
        source = pathlib.Path(source)
        destination = pathlib.Path(destination)
        # the "data" filter keeps owner permission bits, so binaries stay executable
        extract_kwargs = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with tarfile.open(source, "r:xz") as archive:
                archive.extractall(destination, **extract_kwargs)
        except (tarfile.TarError, lzma.LZMAError, EOFError, OSError) as exc:
            self.logger.log(f"Failed to extract {source} to {destination}: {exc}", logging.ERROR)
            raise ExtractionFailedError(source, destination, str(exc)) from exc
        self.logger.log(f"Extracted {source} to {destination}", logging.INFO)
