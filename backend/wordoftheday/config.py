from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .core.errors import ConfigError

# Searched in order when no explicit path is given. /config is where the
# Docker image expects a mounted volume.
DEFAULT_CONFIG_PATHS = (Path("config.yaml"), Path("/config/config.yaml"))


class _Section(BaseSettings):
    """
    A settings section. Values from the config file are passed as init
    kwargs, so environment variables are moved ahead of them.
    """

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, dotenv_settings, init_settings, file_secret_settings


class HttpProxySettings(_Section):
    enabled: bool = False
    port: int = 8443

    model_config = SettingsConfigDict(
        env_prefix="HTTP_PROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ServerSettings(_Section):
    port: int = 8080
    max_workers: int = 10

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class DatabaseSettings(_Section):
    host: str = "localhost"
    port: str = "5432"
    username: str = "mywordoftheday"
    password: str = ""
    name: str = "mywordoftheday"
    driver: str = "postgresql+psycopg"

    # Full SQLAlchemy URL, e.g. sqlite:///./mywordoftheday.db for local dev.
    # When set, the individual connection fields are ignored.
    url: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("port", mode="before")
    @classmethod
    def port_as_text(cls, v):
        return "" if v is None else str(v)


class SMTPSettings(_Section):
    enabled: bool = False
    schedule: str = ""
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    from_address: str = ""
    to_addresses: Annotated[List[str], NoDecode] = []
    template: Optional[str] = None
    timeout_sec: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("to_addresses", mode="before")
    @classmethod
    def split_addresses(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [a.strip() for a in re.split(r"[,\s]+", v) if a.strip()]
        return v


class LoggingSettings(_Section):
    level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.strip().upper()
        # getLevelName maps known names to their number, anything else to a string
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


class Settings(BaseModel):
    server: ServerSettings
    http_proxy: HttpProxySettings
    db: DatabaseSettings
    smtp: SMTPSettings
    logging: LoggingSettings

    def summary(self) -> Dict[str, Any]:
        """Loggable view of the config. Never includes secrets."""
        return {
            "server_port": self.server.port,
            "http_proxy_enabled": self.http_proxy.enabled,
            "http_proxy_port": self.http_proxy.port,
            "db_name": self.db.name,
            "db_host": self.db.host,
            "db_port": self.db.port,
            "db_username": self.db.username,
            "smtp_enabled": self.smtp.enabled,
            "smtp_schedule": self.smtp.schedule,
        }


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _normalise_keys(raw: Any) -> Any:
    if isinstance(raw, dict):
        return {_snake(str(k)): _normalise_keys(v) for k, v in raw.items()}
    return raw


def read_config_file(
    config_path: Optional[Path] = None,
    search_paths: Sequence[Path] = DEFAULT_CONFIG_PATHS,
) -> Dict[str, Any]:
    """
    Read the YAML config file. A missing file is fine (defaults and
    environment variables are used); an unreadable or malformed one is not.
    """
    if config_path is not None:
        candidates = [Path(config_path)]
        if not candidates[0].is_file():
            raise ConfigError(f"config file {config_path} not found")
    else:
        candidates = [p for p in search_paths if p.is_file()]
        if not candidates:
            return {}

    path = candidates[0]
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"unable to read config {path}", exc) from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping")
    return _normalise_keys(raw)


def load_settings(
    config_path: Optional[Path] = None,
    search_paths: Sequence[Path] = DEFAULT_CONFIG_PATHS,
) -> Settings:
    raw = read_config_file(config_path, search_paths)

    server_raw = dict(raw.get("server") or {})
    # httpProxy lives under server in the config file
    proxy_raw = server_raw.pop("http_proxy", None) or {}

    try:
        return Settings(
            server=ServerSettings(**server_raw),
            http_proxy=HttpProxySettings(**proxy_raw),
            db=DatabaseSettings(**(raw.get("db") or {})),
            smtp=SMTPSettings(**(raw.get("smtp") or {})),
            logging=LoggingSettings(**(raw.get("logging") or {})),
        )
    except ValueError as exc:
        raise ConfigError("invalid configuration", exc) from exc
