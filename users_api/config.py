"""Configuration management for the users service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3030
DEFAULT_SERVICE_NAME = "users-api"

_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}

_ENV_KEYS: Dict[str, str] = {
    "host": "USERS_API_HOST",
    "port": "USERS_API_PORT",
    "service_name": "USERS_API_SERVICE_NAME",
    "cors_origins": "USERS_API_CORS_ORIGINS",
    "trusted_proxies": "USERS_API_TRUSTED_PROXIES",
    "log_level": "USERS_API_LOG_LEVEL",
}


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Port must be an integer, got {value!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_log_level(value: object) -> str:
    level = str(value).strip().lower()
    if level not in _LOG_LEVELS:
        raise ValueError(
            f"Unknown log level {value!r}; expected one of {', '.join(sorted(_LOG_LEVELS))}"
        )
    return level


def _parse_list(value: object) -> List[str]:
    if isinstance(value, str):
        return _split_csv(value)
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    raise ValueError(f"Expected a list or comma-separated string, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    service_name: str = DEFAULT_SERVICE_NAME
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    trusted_proxies: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "info"

    @staticmethod
    def from_dict(data: Mapping[str, object], base: Optional["Settings"] = None) -> "Settings":
        """Overlay raw values from ``data`` on top of ``base`` (or the defaults)."""
        unknown = set(data.keys()) - set(_ENV_KEYS)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        settings = base if base is not None else Settings()
        updates: Dict[str, object] = {}
        if data.get("host") is not None:
            host = str(data["host"]).strip()
            if not host:
                raise ValueError("Host must not be empty")
            updates["host"] = host
        if data.get("port") is not None:
            updates["port"] = _parse_port(data["port"])
        if data.get("service_name") is not None:
            name = str(data["service_name"]).strip()
            if not name:
                raise ValueError("Service name must not be empty")
            updates["service_name"] = name
        if data.get("cors_origins") is not None:
            updates["cors_origins"] = _parse_list(data["cors_origins"])
        if data.get("trusted_proxies") is not None:
            updates["trusted_proxies"] = _parse_list(data["trusted_proxies"]) or ["*"]
        if data.get("log_level") is not None:
            updates["log_level"] = _parse_log_level(data["log_level"])
        return replace(settings, **updates)

    @property
    def trusted_proxy_hosts(self) -> List[str] | str:
        if not self.trusted_proxies or self.trusted_proxies == ["*"]:
            return "*"
        return list(self.trusted_proxies)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    return (Path(__file__).resolve().parent.parent / "config" / "users_api.yaml").resolve(strict=False)


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Read a YAML mapping of settings from ``config_path``."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping at the top level")
    return raw


def _settings_from_env(environ: Mapping[str, str]) -> Dict[str, object]:
    values: Dict[str, object] = {}
    for key, env_name in _ENV_KEYS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip():
            values[key] = raw
    return values


def load_settings(
    config_path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from the config file and the environment.

    An explicitly requested file must exist; the default location is optional.
    Environment variables take precedence over values read from the file.
    """
    env = os.environ if environ is None else environ
    explicit = config_path or env.get("USERS_API_CONFIG")
    path = resolve_config_path(explicit)

    settings = Settings()
    if path.exists():
        settings = Settings.from_dict(load_config_file(path), settings)
    elif explicit:
        raise ValueError(f"Configuration file {path} does not exist")

    return Settings.from_dict(_settings_from_env(env), settings)


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_SERVICE_NAME",
    "Settings",
    "load_config_file",
    "load_settings",
    "resolve_config_path",
]
