"""
Shared fixtures and test doubles for the embedded_postgres tests.
"""

import hashlib
import io
import os
import pathlib
import tarfile
import threading
import time
import zipfile
from typing import Dict, List, Optional

import pytest

from embedded_postgres import embedded_postgres_utils
from embedded_postgres.embedded_postgres_settings import CACHE_DIR_ENV_VAR, REPOSITORY_URL_ENV_VAR
from embedded_postgres.runtime_dependency_strategies import (
    ArchiveUnpacker,
    CacheLocator,
    RemoteFetchStrategy,
    TarXzUnpacker,
)

EXECUTABLES = ["bin/pg_ctl", "bin/pg_ctl.exe", "bin/postgres", "bin/initdb"]


def build_txz(files: Optional[Dict[str, bytes]] = None) -> bytes:
    """Builds an xz-compressed tarball shaped like a Postgres distribution."""
    if files is None:
        files = {name: b"#!/bin/sh\nexit 0\n" for name in EXECUTABLES}
        files["share/postgresql/postgres.bki"] = b"bootstrap"
        files["lib/libpq.so.5"] = b"\x7fELF"
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:xz") as archive:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755 if name.startswith("bin/") else 0o644
            archive.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def build_jar(archive: bytes, archive_name: str = "postgres-linux-x86_64.txz") -> bytes:
    """Wraps an archive the way the Maven binaries jars do."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as jar:
        jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        jar.writestr(archive_name, archive)
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b"", chunk_delay: float = 0.0):
        self.status_code = status_code
        self.content = content
        self.headers = {"content-length": str(len(content))}
        self.chunk_delay = chunk_delay

    @property
    def text(self) -> str:
        return self.content.decode()

    def iter_content(self, chunk_size: int = 1):
        chunk_size = 64 if self.chunk_delay else chunk_size
        for start in range(0, len(self.content), chunk_size):
            if self.chunk_delay:
                time.sleep(self.chunk_delay)
            yield self.content[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeRepository:
    """Stands in for requests.get, serving a fixed set of URLs."""

    def __init__(self, chunk_delay: float = 0.0):
        self.resources: Dict[str, bytes] = {}
        self.requested: List[str] = []
        self.statuses: Dict[str, int] = {}
        self.chunk_delay = chunk_delay
        self._lock = threading.Lock()

    def publish(self, url: str, content: bytes, with_checksum: bool = True) -> None:
        self.resources[url] = content
        if with_checksum:
            self.resources[url + ".sha256"] = hashlib.sha256(content).hexdigest().encode()

    def get(self, url, stream=False, timeout=None, **kwargs):
        with self._lock:
            self.requested.append(url)
        if url in self.statuses:
            return FakeResponse(self.statuses[url], b"error")
        if url not in self.resources:
            return FakeResponse(404, b"not found")
        return FakeResponse(200, self.resources[url], self.chunk_delay)


class CountingCacheLocator(CacheLocator):
    def __init__(self, root: pathlib.Path):
        self.root = root
        self.calls = 0

    def locate(self, version: str) -> pathlib.Path:
        self.calls += 1
        return self.root / version / f"postgres-{version}.txz"


class CountingFetchStrategy(RemoteFetchStrategy):
    """Writes a prebuilt archive atomically and counts invocations."""

    def __init__(self, archive: bytes):
        self.archive = archive
        self.calls = 0
        self._lock = threading.Lock()

    def fetch(self, version: str, destination: pathlib.Path) -> None:
        with self._lock:
            self.calls += 1
        destination.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = destination.with_name(f".{destination.name}.{threading.get_ident()}.part")
        tmp_path.write_bytes(self.archive)
        os.replace(tmp_path, destination)


class CountingUnpacker(ArchiveUnpacker):
    def __init__(self):
        self.calls = 0
        self.delegate = TarXzUnpacker()

    def unpack(self, source: pathlib.Path, destination: pathlib.Path) -> None:
        self.calls += 1
        self.delegate.unpack(source, destination)


@pytest.fixture(autouse=True)
def hermetic_environment(tmp_path, monkeypatch):
    """Keeps every test away from the user's real cache and repository settings."""
    monkeypatch.setenv(CACHE_DIR_ENV_VAR, str(tmp_path / "env-cache"))
    monkeypatch.delenv(REPOSITORY_URL_ENV_VAR, raising=False)


@pytest.fixture
def txz_archive() -> bytes:
    return build_txz()


@pytest.fixture
def cache_root(tmp_path) -> pathlib.Path:
    return tmp_path / "cache"


@pytest.fixture
def cache_locator(cache_root) -> CountingCacheLocator:
    return CountingCacheLocator(cache_root)


@pytest.fixture
def fetch_strategy(txz_archive) -> CountingFetchStrategy:
    return CountingFetchStrategy(txz_archive)


@pytest.fixture
def unpacker() -> CountingUnpacker:
    return CountingUnpacker()


@pytest.fixture
def fake_repository(monkeypatch) -> FakeRepository:
    repository = FakeRepository()
    monkeypatch.setattr(embedded_postgres_utils.requests, "get", repository.get)
    return repository


@pytest.fixture
def txz_builder():
    return build_txz


@pytest.fixture
def jar_builder():
    return build_jar


@pytest.fixture
def slow_repository(monkeypatch) -> FakeRepository:
    """A fake repository that streams bodies in small, delayed chunks."""
    repository = FakeRepository(chunk_delay=0.001)
    monkeypatch.setattr(embedded_postgres_utils.requests, "get", repository.get)
    return repository
