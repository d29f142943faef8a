from __future__ import annotations

from pathlib import Path

import pytest

from main import _parse_args, main
from subtracker.database import Database
from subtracker.manager import SubscriptionManager


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_leading_config_option_still_defaults_to_serve() -> None:
    args = _parse_args(["--config", "custom.yaml", "--port", "9000"])
    assert args.command == "serve"
    assert args.config == "custom.yaml"
    assert args.port == 9000

    args = _parse_args(["--config=custom.yaml", "total", "--user-id", "u1"])
    assert args.command == "total"
    assert args.config == "custom.yaml"
    assert args.user_id == "u1"


def test_total_subcommand_parses_filters() -> None:
    args = _parse_args(["total", "--user-id", "user123", "--start-date", "01-2024"])
    assert args.command == "total"
    assert args.user_id == "user123"
    assert args.start_date == "01-2024"
    assert args.service_name is None


def test_init_db_creates_schema(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUBTRACKER_CONFIG", str(tmp_path / "absent.yaml"))
    db_path = tmp_path / "cli.sqlite3"

    assert main(["init-db", "--db", str(db_path)]) == 0
    assert Database(db_path).list() == []


def test_total_prints_sum(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("SUBTRACKER_CONFIG", str(tmp_path / "absent.yaml"))
    db_path = tmp_path / "cli.sqlite3"
    database = Database(db_path)
    database.initialize()
    manager = SubscriptionManager(database)
    manager.create("Netflix", 999, "user123", "01-2024")
    manager.create("Spotify", 499, "user123", "02-2024")

    assert main(["total", "--db", str(db_path), "--user-id", "user123"]) == 0
    assert capsys.readouterr().out.strip() == "1498"


def test_total_reports_validation_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("SUBTRACKER_CONFIG", str(tmp_path / "absent.yaml"))
    db_path = tmp_path / "cli.sqlite3"

    assert main(["total", "--db", str(db_path), "--start-date", "13-2024"]) == 1
    assert "bad start date" in capsys.readouterr().err
