from __future__ import annotations

from pathlib import Path

import pytest

from subtracker.config import ServiceConfig, load_config, resolve_config_path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml", environ={})
    assert config.host == "0.0.0.0"
    assert config.port == 8080
    assert config.log_level == "INFO"
    assert config.database_path.name == "subscriptions.sqlite3"


def test_yaml_settings_are_loaded_relative_to_file(tmp_path: Path) -> None:
    config_file = tmp_path / "service.yaml"
    config_file.write_text(
        "service:\n"
        "  database_path: data/subs.sqlite3\n"
        "  host: 127.0.0.1\n"
        "  port: 9000\n"
        "  log_level: debug\n",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.database_path == (tmp_path / "data" / "subs.sqlite3").resolve()
    assert config.host == "127.0.0.1"
    assert config.port == 9000
    assert config.log_level == "DEBUG"


def test_environment_overrides_file(tmp_path: Path) -> None:
    config_file = tmp_path / "service.yaml"
    config_file.write_text("service:\n  port: 9000\n", encoding="utf-8")

    config = load_config(
        config_file,
        environ={
            "SUBTRACKER_PORT": "9100",
            "SUBTRACKER_DB_PATH": str(tmp_path / "env.sqlite3"),
            "SUBTRACKER_LOG_LEVEL": "warning",
        },
    )

    assert config.port == 9100
    assert config.database_path == (tmp_path / "env.sqlite3").resolve()
    assert config.log_level == "WARNING"


@pytest.mark.parametrize("data", [{"port": "http"}, {"port": 70000}, {"log_level": "chatty"}])
def test_invalid_values_raise(data: dict) -> None:
    with pytest.raises(ValueError):
        ServiceConfig.from_dict(data)


def test_resolve_config_path_prefers_environment(tmp_path: Path) -> None:
    assert resolve_config_path(str(tmp_path / "custom.yaml")) == (tmp_path / "custom.yaml").resolve()
    assert resolve_config_path(None).name == "service.yaml"
