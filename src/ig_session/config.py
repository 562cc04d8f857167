"""Session config loading from config.json plus env overrides."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator


def _env_path(name: str, fallback: Path) -> Path:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else fallback.expanduser()


_USER_HOME = Path.home()
_XDG_CONFIG_HOME = _env_path("XDG_CONFIG_HOME", _USER_HOME / ".config")
_XDG_STATE_HOME = _env_path("XDG_STATE_HOME", _USER_HOME / ".local" / "state")
DEFAULT_CONFIG_HOME = _XDG_CONFIG_HOME / "ig-session"
DEFAULT_STATE_HOME = _XDG_STATE_HOME / "ig-session"
DEFAULT_IG_CONFIG_JSON = _env_path("IG_CONFIG_JSON", DEFAULT_CONFIG_HOME / "config.json")

LIVE_API_BASE = "https://api.ig.com/gateway/deal"
DEMO_API_BASE = "https://demo-api.ig.com/gateway/deal"

_SECTIONS = {"credentials", "transport", "logging"}


class CredentialsConfig(BaseModel):
    identifier: str = ""
    password: SecretStr = SecretStr("")
    api_key: str = ""
    demo: bool = True


class TransportConfig(BaseModel):
    live_base_url: str = LIVE_API_BASE
    demo_base_url: str = DEMO_API_BASE
    request_timeout_seconds: float = 20.0
    connect_timeout_seconds: float = 10.0

    @field_validator("live_base_url", "demo_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    audit_db: Path = DEFAULT_STATE_HOME / "audit.db"
    log_file: Path = DEFAULT_STATE_HOME / "ig-session.log"


class AppConfig(BaseModel):
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def expanded(self) -> "AppConfig":
        clone = self.model_copy(deep=True)
        clone.logging.audit_db = clone.logging.audit_db.expanduser()
        clone.logging.log_file = clone.logging.log_file.expanduser()
        return clone

    def ensure_dirs(self) -> None:
        expanded = self.expanded()
        expanded.logging.audit_db.parent.mkdir(parents=True, exist_ok=True)
        expanded.logging.log_file.parent.mkdir(parents=True, exist_ok=True)


def _coerce_env_value(value: str) -> Any:
    lower = value.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _read_config_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}

    if isinstance(loaded, dict):
        return loaded
    return {}


def _extract_ig_config(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    raw_ig = data.get("ig")
    if not isinstance(raw_ig, dict):
        return out
    for section in _SECTIONS:
        value = raw_ig.get(section)
        if isinstance(value, dict):
            out[section] = value
    return out


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    result = dict(data)
    for key, raw in os.environ.items():
        if not key.startswith("IG_") or key == "IG_CONFIG_JSON":
            continue
        tokens = key[len("IG_") :].lower().split("_")
        section = tokens[0]
        if section not in _SECTIONS or len(tokens) == 1:
            continue
        field = "_".join(tokens[1:])
        section_obj = dict(result.get(section, {}))
        # identifiers and keys must stay strings even when they look numeric
        if section == "credentials" and field != "demo":
            section_obj[field] = raw
        else:
            section_obj[field] = _coerce_env_value(raw)
        result[section] = section_obj
    return result


def load_config(path: Path | None = None) -> AppConfig:
    raw = _read_config_json(path or DEFAULT_IG_CONFIG_JSON)
    from_file = _extract_ig_config(raw)
    merged = _apply_env_overrides(from_file)
    return AppConfig.model_validate(merged).expanded()


def configure_logging(cfg: AppConfig) -> None:
    cfg.ensure_dirs()
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[logging.FileHandler(cfg.logging.log_file), logging.StreamHandler()],
    )
