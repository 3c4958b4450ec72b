"""Tests for configuration models, JSON loading and layered merging."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from restgate.config import Config, load_config
from restgate.config.load_utils import merge_layers, read_json_object
from restgate.config.schema import CredentialsConfig, LoggingConfig, ServerConfig
from restgate.core.errors import ConfigError, LoadError


@pytest.fixture
def global_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config directory at a temp location."""
    path = tmp_path / "home" / ".restgate"
    monkeypatch.setattr("restgate.config.loader.get_restgate_dir", lambda: path)
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


def _write_config(directory: Path, data: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSchema:
    """Tests for the pydantic models."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8080
        assert config.server.chunk_size == 65_536
        assert config.server.max_request_size == 1_048_576
        assert config.server.read_timeout is None
        assert config.server.handler_timeout is None
        assert config.server.handler_threads == 16
        assert config.credentials.username == "TestUsername"
        assert config.credentials.password == "TestPassword"
        assert config.logging.level == "INFO"

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Config.model_validate({"server": {"prot": 8080}})

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=port)

    def test_port_zero_allowed(self) -> None:
        """Port 0 asks the OS for an ephemeral port."""
        assert ServerConfig(port=0).port == 0

    @pytest.mark.parametrize(
        "field",
        ["chunk_size", "max_request_size", "read_timeout", "handler_timeout", "handler_threads"],
    )
    def test_positive_limits(self, field: str) -> None:
        with pytest.raises(ValidationError):
            ServerConfig.model_validate({field: 0})

    def test_username_with_colon_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not contain"):
            CredentialsConfig(username="user:name")

    def test_password_with_colon_allowed_by_schema(self) -> None:
        assert CredentialsConfig(password="a:b").password == "a:b"

    def test_log_level_is_constrained(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig.model_validate({"level": "LOUD"})


class TestReadJsonObject:
    """Tests for read_json_object."""

    def test_missing_required_file(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="config: no such file"):
            read_json_object(tmp_path / "nope.json")

    def test_missing_optional_file(self, tmp_path: Path) -> None:
        assert read_json_object(tmp_path / "nope.json", required=False) is None

    def test_empty_file_is_empty_dict(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("   \n", encoding="utf-8")
        assert read_json_object(path) == {}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(LoadError, match="not valid JSON \\(line 1"):
            read_json_object(path)

    def test_non_object_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(LoadError, match="must hold a JSON object, not list"):
            read_json_object(path)

    def test_utf8_bom_tolerated(self, tmp_path: Path) -> None:
        path = tmp_path / "bom.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"a": 1}')
        assert read_json_object(path) == {"a": 1}


class TestLoadConfig:
    """Tests for load_config layering."""

    def test_no_files_gives_defaults(self, global_dir: Path, project_dir: Path) -> None:
        assert load_config(cwd=project_dir) == Config()

    def test_global_layer(self, global_dir: Path, project_dir: Path) -> None:
        _write_config(global_dir, {"server": {"port": 9000}})

        assert load_config(cwd=project_dir).server.port == 9000

    def test_local_overrides_global(self, global_dir: Path, project_dir: Path) -> None:
        _write_config(global_dir, {"server": {"port": 9000, "host": "127.0.0.2"}})
        _write_config(project_dir / ".restgate", {"server": {"port": 9100}})

        config = load_config(cwd=project_dir)

        assert config.server.port == 9100
        assert config.server.host == "127.0.0.2"

    def test_explicit_path_skips_layers(
        self, global_dir: Path, project_dir: Path, tmp_path: Path
    ) -> None:
        _write_config(global_dir, {"server": {"port": 9000}})
        explicit = tmp_path / "explicit.json"
        explicit.write_text(json.dumps({"logging": {"level": "DEBUG"}}), encoding="utf-8")

        config = load_config(path=explicit, cwd=project_dir)

        assert config.server.port == 8080
        assert config.logging.level == "DEBUG"

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="no such file"):
            load_config(path=tmp_path / "missing.json")

    def test_invalid_json_in_layer(self, global_dir: Path, project_dir: Path) -> None:
        (project_dir / ".restgate").mkdir()
        (project_dir / ".restgate" / "config.json").write_text("{", encoding="utf-8")

        with pytest.raises(ConfigError, match="not valid JSON"):
            load_config(cwd=project_dir)

    def test_validation_error_names_sources(self, global_dir: Path, project_dir: Path) -> None:
        path = _write_config(global_dir, {"server": {"port": "not-a-port"}})

        with pytest.raises(ConfigError, match="Config validation failed") as exc_info:
            load_config(cwd=project_dir)

        assert str(path) in exc_info.value.message

    def test_home_directory_loaded_once(self, global_dir: Path) -> None:
        """Running from the home directory does not apply the global file twice."""
        _write_config(global_dir, {"server": {"port": 9000}})

        assert load_config(cwd=global_dir.parent).server.port == 9000


class TestMergeLayers:
    """Tests for merge_layers."""

    def test_nested_objects_merge(self) -> None:
        base = {"server": {"port": 1, "host": "a"}}
        override = {"server": {"port": 2}}

        assert merge_layers(base, override) == {"server": {"port": 2, "host": "a"}}

    def test_lists_replace(self) -> None:
        assert merge_layers({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_later_layers_win(self) -> None:
        assert merge_layers({"a": 1}, {"a": 2}, {"a": 3}) == {"a": 3}

    def test_no_layers(self) -> None:
        assert merge_layers() == {}

    def test_inputs_not_modified(self) -> None:
        base = {"a": {"b": 1}}
        merge_layers(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}
