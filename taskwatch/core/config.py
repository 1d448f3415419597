"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr, field_validator, model_validator

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

_DURATION_RE = re.compile(r"^(\d+)([smhdwy])$")

_UNIT_SECONDS: dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 60 * 60 * 24,
    "w": 60 * 60 * 24 * 7,
    "y": 60 * 60 * 24 * 365,  # approximate
}


class ConfigError(Exception):
    """Configuration is missing or invalid. Fatal at startup."""


def parse_duration(value: str | int | float) -> float:
    """Convert ``"15m"``, ``"7d"``, ``"3600s"`` (or a bare number) to seconds.

    Raises:
        ConfigError: If the string does not match ``<digits><unit>``.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(value.strip())
    if not match:
        raise ConfigError(
            f'Invalid duration format: {value!r}. Expected format like "15m", "7d", "3600s".'
        )
    return float(int(match.group(1)) * _UNIT_SECONDS[match.group(2)])


class MonitorConfig(BaseModel):
    """Job health monitor configuration."""

    interval_secs: float = 300.0
    cooldown_minutes: float = 60.0
    waiting_grace_minutes: float = 5.0
    max_concurrency: int = 1
    send_timeout_secs: float = 30.0

    @field_validator("interval_secs", mode="before")
    @classmethod
    def _parse_interval(cls, v: Any) -> float:
        try:
            return parse_duration(v)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("max_concurrency")
    @classmethod
    def _positive_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be >= 1")
        return v


class DatabaseConfig(BaseModel):
    """Connection details for the job store (SQL Server by default)."""

    url: SecretStr | None = None
    server: str = ""
    port: int | None = None
    database: str = ""
    username: str = ""
    password: SecretStr = SecretStr("")
    schema_name: str | None = None
    driver: str = "ODBC Driver 18 for SQL Server"
    encrypt: bool = False
    trust_server_certificate: bool = True
    echo: bool = False

    def missing_fields(self) -> list[str]:
        """Names of required connection fields that are empty."""
        if self.url is not None and self.url.get_secret_value():
            return []
        missing: list[str] = []
        if not self.server:
            missing.append("server")
        if not self.database:
            missing.append("database")
        if not self.username:
            missing.append("username")
        if not self.password.get_secret_value():
            missing.append("password")
        return missing


class MailConfig(BaseModel):
    """SMTP delivery configuration."""

    enabled: bool = False
    host: str = "smtp.example.com"
    port: int = 587
    starttls: bool = True
    use_ssl: bool = False
    username: str = ""
    password: SecretStr = SecretStr("")
    sender: str = '"Task Monitor" <monitor@example.com>'
    default_recipients: list[str] = []
    timeout_secs: float = 10.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    monitor: MonitorConfig = MonitorConfig()
    database: DatabaseConfig = DatabaseConfig()
    mail: MailConfig = MailConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _smtp_timeout_below_send_timeout(self) -> Settings:
        # A send abandoned by the monitor must not still deliver later.
        if self.mail.enabled and self.mail.timeout_secs >= self.monitor.send_timeout_secs:
            raise ValueError(
                "mail.timeout_secs must be less than monitor.send_timeout_secs"
            )
        return self


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
