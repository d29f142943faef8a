"""Configuration management for the subscription tracker service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class ServiceConfig:
    """Settings for the HTTP service and its backing database."""

    database_path: Path
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""

        raw_db_path = data.get("database_path")
        if raw_db_path:
            candidate = Path(str(raw_db_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = candidate.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        return ServiceConfig(
            database_path=database_path,
            host=str(data.get("host", "0.0.0.0")),
            port=_parse_port(data.get("port", 8080)),
            log_level=_parse_log_level(data.get("log_level", "INFO")),
        )


def _parse_port(value: object) -> int:
    try:
        port = int(str(value))
    except ValueError as exc:
        raise ValueError(f"Invalid port {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_log_level(value: object) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level {value!r}")
    return level


def _apply_environment(config: ServiceConfig, environ: Mapping[str, str]) -> ServiceConfig:
    overrides: Dict[str, object] = {}
    if environ.get("SUBTRACKER_DB_PATH"):
        overrides["database_path"] = resolve_database_path(environ["SUBTRACKER_DB_PATH"])
    if environ.get("SUBTRACKER_HOST"):
        overrides["host"] = environ["SUBTRACKER_HOST"]
    if environ.get("SUBTRACKER_PORT"):
        overrides["port"] = _parse_port(environ["SUBTRACKER_PORT"])
    if environ.get("SUBTRACKER_LOG_LEVEL"):
        overrides["log_level"] = _parse_log_level(environ["SUBTRACKER_LOG_LEVEL"])
    return replace(config, **overrides) if overrides else config


def load_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """Load settings from an optional YAML file, then apply environment overrides."""

    raw: Dict[str, object] = {}
    base_path: Path | None = None
    if config_path is not None and config_path.is_file():
        with config_path.open("r", encoding="utf-8") as handle:
            document = yaml.safe_load(handle) or {}
        section = document.get("service") or {}
        if not isinstance(section, dict):
            raise ValueError("The 'service' key must contain a mapping of settings")
        raw = section
        base_path = config_path.parent

    config = ServiceConfig.from_dict(raw, base_path=base_path)
    return _apply_environment(config, os.environ if environ is None else environ)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "service.yaml").resolve(strict=False)
    return candidate


__all__ = ["ServiceConfig", "load_config", "resolve_config_path"]
