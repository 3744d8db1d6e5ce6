"""
Tests for driverwire configuration system.
"""

import json
import os
import tempfile
from typing import Optional

import pytest

from driverwire.config import (
    DEFAULT_STARTUP_TIMEOUT,
    DEFAULT_STATUS_TIMEOUT,
    ConfigLoader,
    ConfigurationError,
    DriverwireConfig,
    RemoteOptions,
    ServiceOptions,
    SupplierKind,
    TransportOptions,
    find_config_file,
    get_env,
    get_env_bool,
    get_env_float,
    get_env_int,
    get_env_key,
    load_config,
    load_env_config,
    load_file,
    merge_configs,
)
from driverwire.config.env import ENV_MAPPINGS, coerce


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove DRIVERWIRE_* variables inherited from the shell."""
    for key in list(os.environ):
        if key.startswith("DRIVERWIRE_"):
            monkeypatch.delenv(key)


class TestServiceOptions:
    """Tests for ServiceOptions class."""

    def test_default_values(self):
        """Test default service options."""
        options = ServiceOptions()
        assert options.executable_path is None
        assert options.port == 0
        assert options.args == []
        assert options.startup_timeout == DEFAULT_STARTUP_TIMEOUT == 20.0
        assert options.use_technology_preview is False

    def test_args_from_string(self):
        """Test splitting an argument string."""
        options = ServiceOptions(args="--verbose --log debug")
        assert options.args == ["--verbose", "--log", "debug"]

    def test_validation(self):
        """Test value validation."""
        with pytest.raises(ValueError):
            ServiceOptions(port=70000)
        with pytest.raises(ValueError):
            ServiceOptions(startup_timeout=0)

    def test_merge(self):
        """Test merging service options."""
        base = ServiceOptions(port=4444, env={"A": "1"})
        override = ServiceOptions(startup_timeout=5, env={"B": "2"})
        merged = base.merge(override)

        assert merged.port == 4444
        assert merged.startup_timeout == 5
        assert merged.env == {"A": "1", "B": "2"}


class TestTransportOptions:
    """Tests for TransportOptions class."""

    def test_default_headers(self):
        """Test that JSON headers are sent by default."""
        options = TransportOptions()
        assert "application/json" in options.headers["Accept"]

    def test_merge_headers(self):
        """Test merging headers."""
        merged = TransportOptions().merge(TransportOptions(headers={"X-Test": "1"}))
        assert merged.headers["X-Test"] == "1"
        assert "Accept" in merged.headers


class TestRemoteOptions:
    """Tests for RemoteOptions class."""

    def test_default_values(self):
        """Test default remote options."""
        options = RemoteOptions()
        assert options.server_url is None
        assert options.supplier == SupplierKind.REMOTE
        assert options.status_timeout == DEFAULT_STATUS_TIMEOUT == 60.0

    def test_trailing_slash_stripped(self):
        """Test server URL normalization."""
        assert RemoteOptions(server_url="http://grid:4444/wd/hub/").server_url == "http://grid:4444/wd/hub"

    def test_supplier_from_string(self):
        """Test parsing the supplier kind."""
        assert RemoteOptions(supplier="local_service").supplier == SupplierKind.LOCAL_SERVICE
        with pytest.raises(ValueError):
            RemoteOptions(supplier="reflection")


class TestDriverwireConfig:
    """Tests for DriverwireConfig class."""

    def test_from_dict(self):
        """Test creating config from dictionary."""
        config = DriverwireConfig.from_dict(
            {"service": {"port": 9515}, "remote": {"supplier": "external"}}
        )
        assert config.service.port == 9515
        assert config.remote.supplier == SupplierKind.EXTERNAL

    def test_to_dict(self):
        """Test converting config to dictionary."""
        data = DriverwireConfig().to_dict()
        assert data["service"]["startup_timeout"] == 20.0
        assert data["remote"]["supplier"] == "remote"
        assert "server_url" not in data["remote"]

    def test_merge(self):
        """Test merging configs."""
        base = DriverwireConfig.from_dict({"service": {"port": 4444}, "remote": {"server_url": "http://a"}})
        override = DriverwireConfig.from_dict({"remote": {"supplier": "external"}})
        merged = base.merge(override)

        assert merged.service.port == 4444
        assert merged.remote.server_url == "http://a"
        assert merged.remote.supplier == SupplierKind.EXTERNAL


class TestEnvironmentVariables:
    """Tests for environment variable support."""

    def test_get_env_key(self):
        """Test converting config key to env var name."""
        assert get_env_key("service.port") == "DRIVERWIRE_SERVICE_PORT"
        assert get_env_key("remote.status-timeout") == "DRIVERWIRE_REMOTE_STATUS_TIMEOUT"

    def test_get_env_bool(self):
        """Test getting boolean from environment."""
        os.environ["DRIVERWIRE_TEST_BOOL"] = "yes"
        try:
            assert get_env_bool("test.bool") is True
        finally:
            del os.environ["DRIVERWIRE_TEST_BOOL"]

    def test_get_env_numbers(self, monkeypatch):
        """Test getting numbers from environment."""
        monkeypatch.setenv("DRIVERWIRE_TEST_INT", "42")
        monkeypatch.setenv("DRIVERWIRE_TEST_FLOAT", "2.5")
        assert get_env_int("test.int") == 42
        assert get_env_float("test.float") == 2.5

    def test_get_env_default(self):
        """Test environment variable default value."""
        assert get_env("nonexistent.key", default="default") == "default"

    def test_coerce(self):
        """Test converting strings to option types."""
        assert coerce("9515", int) == 9515
        assert coerce("2.5", float) == 2.5
        assert coerce("On", bool) is True
        assert coerce("nope", bool) is False
        assert coerce("--log \"debug level\"", list[str]) == ["--log", "debug level"]
        assert coerce("A=1, B = two", dict[str, str]) == {"A": "1", "B": "two"}
        assert coerce("http://grid", Optional[str]) == "http://grid"

    def test_every_option_mapped(self):
        """Test that each option of each section has a variable."""
        assert "service.port" in ENV_MAPPINGS
        assert "service.use_technology_preview" in ENV_MAPPINGS
        assert "transport.headers" in ENV_MAPPINGS
        assert "remote.status_timeout" in ENV_MAPPINGS

    def test_invalid_number(self, monkeypatch):
        """Test that a malformed number is reported as a configuration error."""
        monkeypatch.setenv("DRIVERWIRE_SERVICE_PORT", "many")
        with pytest.raises(ConfigurationError, match="DRIVERWIRE_SERVICE_PORT"):
            load_config(overrides={})

    def test_load_env_config(self, monkeypatch):
        """Test reading mapped variables."""
        monkeypatch.setenv("DRIVERWIRE_SERVICE_PORT", "9515")
        monkeypatch.setenv("DRIVERWIRE_SERVICE_ENV", "A=1,B=2")
        monkeypatch.setenv("DRIVERWIRE_REMOTE_SERVER_URL", "http://grid:4444")

        data = load_env_config()

        assert data["service"] == {"port": 9515, "env": {"A": "1", "B": "2"}}
        assert data["remote"] == {"server_url": "http://grid:4444"}
        assert "transport" not in data

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test that environment variables beat the config file."""
        path = tmp_path / "driverwire.config.json"
        path.write_text(json.dumps({"service": {"port": 1111, "startup_timeout": 5}}))
        monkeypatch.setenv("DRIVERWIRE_SERVICE_PORT", "2222")

        config = load_config(path)

        assert config.service.port == 2222
        assert config.service.startup_timeout == 5


class TestConfigLoader:
    """Tests for configuration file loading."""

    def test_load_json(self):
        """Test loading JSON configuration."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"service": {"port": 4444}}, f)
            f.flush()

            try:
                data = load_file(f.name)
                assert data["service"]["port"] == 4444
            finally:
                os.unlink(f.name)

    def test_load_toml(self, tmp_path):
        """Test loading TOML configuration."""
        path = tmp_path / "driverwire.config.toml"
        path.write_text('[remote]\nserver_url = "http://grid:4444"\nsupplier = "external"\n')

        config = load_config(path, load_env=False)
        assert config.remote.server_url == "http://grid:4444"
        assert config.remote.supplier == SupplierKind.EXTERNAL

    def test_load_yaml(self, tmp_path):
        """Test loading YAML configuration."""
        pytest.importorskip("yaml")
        path = tmp_path / "driverwire.config.yaml"
        path.write_text("service:\n  port: 5555\n  args: --verbose\n")

        config = load_config(path, load_env=False)
        assert config.service.port == 5555
        assert config.service.args == ["--verbose"]

    def test_missing_file(self, tmp_path):
        """Test that an explicit missing file fails."""
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "nope.json")

    def test_malformed_file(self, tmp_path):
        """Test that a malformed file fails."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_file(path)

    def test_unsupported_format(self, tmp_path):
        """Test that unknown extensions are rejected."""
        path = tmp_path / "config.ini"
        path.write_text("[x]")
        with pytest.raises(ConfigurationError):
            load_file(path)

    def test_root_must_be_mapping(self, tmp_path):
        """Test that a list at the root is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError):
            load_file(path)

    def test_invalid_values(self):
        """Test that validation errors surface as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_config(overrides={"service": {"port": -1}}, load_env=False)

    def test_find_config_file(self, tmp_path):
        """Test searching for a config file."""
        path = tmp_path / "driverwire.config.toml"
        path.write_text("")
        assert find_config_file(search_paths=[str(tmp_path)]) == path
        assert find_config_file(search_paths=[str(tmp_path / "missing")]) is None

    def test_auto_found_bad_file_ignored(self, tmp_path, caplog):
        """Test that a broken auto-found file is skipped with a warning."""
        (tmp_path / "driverwire.config.json").write_text("{broken")
        loader = ConfigLoader(search_paths=[str(tmp_path)], load_env=False)

        with caplog.at_level("WARNING"):
            config = loader.load()

        assert config.service.port == 0
        assert "Ignoring configuration file" in caplog.text

    def test_load_with_overrides(self, tmp_path, monkeypatch):
        """Test loading with programmatic overrides."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DRIVERWIRE_SERVICE_PORT", "2222")

        config = load_config(overrides={"service": {"port": 3333}})
        assert config.service.port == 3333

    def test_merge_configs(self):
        """Test merging multiple configurations."""
        merged = merge_configs({"service": {"port": 1}}, {"service": {"args": ["-v"]}})
        assert merged == {"service": {"port": 1, "args": ["-v"]}}
