"""
This file contains various utility functions like I/O operations, handling paths, etc.
"""

import hashlib
import logging
import os
import pathlib
import platform
import uuid
from enum import Enum
from typing import Optional, Union

import requests

from embedded_postgres.embedded_postgres_exceptions import EmbeddedPostgresException
from embedded_postgres.embedded_postgres_logger import EmbeddedPostgresLogger

DOWNLOAD_TIMEOUT = (15, 300)
CHUNK_SIZE = 1024 * 1024


class PlatformId(str, Enum):
    """
    Platform identifiers of the form "<os>-<arch>"
    """

    WIN_x64 = "win-x64"
    OSX_x64 = "osx-x64"
    OSX_arm64 = "osx-arm64"
    LINUX_x86 = "linux-x86"
    LINUX_x64 = "linux-x64"
    LINUX_arm64 = "linux-arm64"
    LINUX_ppc64le = "linux-ppc64le"


class PlatformUtils:
    """
    This class provides utilities for platform detection and identification.
    """

    @staticmethod
    def get_platform_id() -> PlatformId:
        """
        Returns the platform id for the current system
        """
        system_map = {"Windows": "win", "Darwin": "osx", "Linux": "linux"}
        machine_map = {
            "AMD64": "x64",
            "x86_64": "x64",
            "i386": "x86",
            "i686": "x86",
            "aarch64": "arm64",
            "arm64": "arm64",
            "ppc64le": "ppc64le",
        }
        system = platform.system()
        machine = platform.machine()
        if system in system_map and machine in machine_map:
            platform_id = system_map[system] + "-" + machine_map[machine]
            try:
                return PlatformId(platform_id)
            except ValueError:
                pass
        raise EmbeddedPostgresException(f"Unknown platform: {system} {machine}")

    @staticmethod
    def is_windows(platform_id: Optional[PlatformId] = None) -> bool:
        if platform_id is None:
            return platform.system() == "Windows"
        return platform_id.value.startswith("win")


class FileUtils:
    """
    Utility functions for file operations.
    """

    @staticmethod
    def temporary_sibling(target_path: Union[str, pathlib.Path], suffix: str = "part") -> pathlib.Path:
        """
        Returns a unique path next to target_path. Writers that use distinct siblings
        and rename on completion never expose a half-written target.
        """
        target_path = pathlib.Path(target_path)
        return target_path.with_name(f".{target_path.name}.{uuid.uuid4().hex}.{suffix}")

    @staticmethod
    def download_file(
        logger: EmbeddedPostgresLogger,
        url: str,
        target_path: Union[str, pathlib.Path],
    ) -> pathlib.Path:
        """
        Downloads the file from the given URL to the given {target_path}.

        The body is streamed into a temporary sibling which is renamed onto
        target_path once complete.
        """
        target_path = pathlib.Path(target_path)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = FileUtils.temporary_sibling(target_path)
        try:
            with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
                if response.status_code != 200:
                    logger.log(
                        f"Error downloading file '{url}': {response.status_code}",
                        logging.ERROR,
                    )
                    raise EmbeddedPostgresException(
                        f"Error downloading file '{url}': HTTP {response.status_code}"
                    )
                total_size = int(response.headers.get("content-length", 0))
                logger.log(
                    f"Downloading file '{url}' to '{target_path}' ({total_size / 1024 / 1024:.2f} MB)",
                    logging.INFO,
                )
                with open(tmp_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            os.replace(tmp_path, target_path)
        except requests.RequestException as exc:
            logger.log(f"Error downloading file '{url}': {exc}", logging.ERROR)
            raise EmbeddedPostgresException(f"Error downloading file '{url}': {exc}") from exc
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        return target_path

    @staticmethod
    def fetch_text(logger: EmbeddedPostgresLogger, url: str) -> Optional[str]:
        """
        Returns the body of a small text resource, or None when the server does
        not serve it. Any 4xx answer, 401 and 403 included, counts as absent.
        """
        try:
            with requests.get(url, timeout=DOWNLOAD_TIMEOUT) as response:
                if 400 <= response.status_code < 500:
                    return None
                if response.status_code != 200:
                    raise EmbeddedPostgresException(
                        f"Error fetching '{url}': HTTP {response.status_code}"
                    )
                return response.text
        except requests.RequestException as exc:
            logger.log(f"Error fetching '{url}': {exc}", logging.ERROR)
            raise EmbeddedPostgresException(f"Error fetching '{url}': {exc}") from exc

    @staticmethod
    def sha256_of_file(path: Union[str, pathlib.Path]) -> str:
        digest = hashlib.sha256()
        with open(path, "rb") as f:
            for block in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(block)
        return digest.hexdigest()
