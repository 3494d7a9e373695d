"""
Tests for the immutable RuntimeConfig.
"""

import datetime
import io
import os
import pathlib
import sys
import tempfile

import pytest
from pydantic import ValidationError

from embedded_postgres import (
    DefaultCacheLocator,
    MavenRemoteFetchStrategy,
    PathResolutionError,
    RuntimeConfig,
    TarXzUnpacker,
)


class TestDefaults:
    """A freshly built configuration carries only defaults."""

    def test_default_values(self):
        config = RuntimeConfig()

        assert config.version == "13.2.0"
        assert config.port == 5432
        assert config.database == "postgres"
        assert config.username == "postgres"
        assert config.password == "postgres"
        assert config.runtime_path is None
        assert config.data_path is None
        assert config.locale is None
        assert config.start_timeout == datetime.timedelta(seconds=15)
        assert config.output is sys.stdout
        assert config.cache_locator is None
        assert config.remote_fetch_strategy is None
        assert config.unpacker is None

    def test_default_strategies(self):
        config = RuntimeConfig()

        assert isinstance(config.cache_locator_or_default(), DefaultCacheLocator)
        assert isinstance(config.remote_fetch_strategy_or_default(), MavenRemoteFetchStrategy)
        assert isinstance(config.unpacker_or_default(), TarXzUnpacker)

    def test_configured_strategies_take_precedence(self, cache_locator, fetch_strategy, unpacker):
        config = (
            RuntimeConfig()
            .with_cache_locator(cache_locator)
            .with_remote_fetch_strategy(fetch_strategy)
            .with_unpacker(unpacker)
        )

        assert config.cache_locator_or_default() is cache_locator
        assert config.remote_fetch_strategy_or_default() is fetch_strategy
        assert config.unpacker_or_default() is unpacker

    def test_default_runtime_path_is_ephemeral_and_per_process(self):
        config = RuntimeConfig().with_port(6543)
        runtime_path = config.resolved_runtime_path()

        assert runtime_path.parent == pathlib.Path(tempfile.gettempdir()) / "embedded_postgres"
        assert runtime_path.name == f"{os.getpid()}-6543-13.2.0"
        assert config.resolved_runtime_path() == runtime_path

    def test_data_path_defaults_to_runtime_path(self, tmp_path):
        config = RuntimeConfig().with_runtime_path(tmp_path / "runtime")

        assert config.resolved_data_path() == tmp_path / "runtime"
        assert config.with_data_path(tmp_path / "data").resolved_data_path() == tmp_path / "data"


class TestTransformers:
    """Every with_* call yields a new value and leaves the original untouched."""

    @pytest.mark.parametrize(
        "method, value, field, expected",
        [
            ("with_version", "12.6.0", "version", "12.6.0"),
            ("with_port", 5433, "port", 5433),
            ("with_database", "app", "database", "app"),
            ("with_username", "admin", "username", "admin"),
            ("with_password", "secret", "password", "secret"),
            ("with_locale", "C", "locale", "C"),
            ("with_start_timeout", 30, "start_timeout", datetime.timedelta(seconds=30)),
            (
                "with_start_timeout",
                datetime.timedelta(minutes=1),
                "start_timeout",
                datetime.timedelta(minutes=1),
            ),
        ],
    )
    def test_changes_exactly_one_field(self, method, value, field, expected):
        original = RuntimeConfig()
        changed = getattr(original, method)(value)

        assert changed is not original
        assert getattr(changed, field) == expected
        assert getattr(original, field) == getattr(RuntimeConfig(), field)
        for name in RuntimeConfig.model_fields:
            if name != field:
                assert getattr(changed, name) == getattr(original, name), name

    def test_output_sink(self):
        sink = io.StringIO()
        config = RuntimeConfig().with_output(sink)

        assert config.output is sink

    def test_config_is_frozen(self):
        config = RuntimeConfig()

        with pytest.raises(ValidationError):
            config.port = 1234

    def test_base_config_can_be_shared(self):
        base = RuntimeConfig().with_version("11.11.0")
        first = base.with_port(5433)
        second = base.with_port(5434)

        assert (first.port, second.port, base.port) == (5433, 5434, 5432)
        assert first.version == second.version == "11.11.0"

    def test_rejects_port_out_of_range(self):
        with pytest.raises(ValueError):
            RuntimeConfig().with_port(70000)

    def test_unsupported_version_is_accepted_when_building(self):
        config = RuntimeConfig().with_version("1.0.0")

        assert config.version == "1.0.0"


class TestPathResolution:
    """Relative paths are bound to the working directory when they are set."""

    def test_absolute_path_is_kept(self, tmp_path):
        config = RuntimeConfig().with_runtime_path(tmp_path / "runtime")

        assert config.runtime_path == tmp_path / "runtime"

    def test_relative_path_resolves_at_set_time(self, tmp_path, monkeypatch):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()

        monkeypatch.chdir(first)
        set_time_cwd = pathlib.Path(os.getcwd())
        config = RuntimeConfig().with_runtime_path("runtime").with_data_path("nested/../data")
        monkeypatch.chdir(second)

        assert config.runtime_path == set_time_cwd / "runtime"
        assert config.data_path == set_time_cwd / "data"
        assert config.resolved_runtime_path() == set_time_cwd / "runtime"

    def test_relative_path_passed_to_constructor_is_resolved(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = RuntimeConfig(runtime_path="runtime")

        assert config.runtime_path == pathlib.Path(os.getcwd()) / "runtime"

    def test_working_directory_failure(self, monkeypatch):
        def missing_cwd():
            raise FileNotFoundError("working directory was removed")

        monkeypatch.setattr(os, "getcwd", missing_cwd)

        with pytest.raises(PathResolutionError) as exc_info:
            RuntimeConfig().with_runtime_path("runtime")

        assert "runtime" in str(exc_info.value)
