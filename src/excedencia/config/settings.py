from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "settings.yaml"


class ServerSettings(BaseModel):
    name: str = "bon-calculadora"
    version: str = "1.0.0"
    transport: Literal["stdio", "sse", "streamable-http"] = "streamable-http"
    host: str = "127.0.0.1"
    port: int = 8888
    path: str = "/mcp"


class RulesetSettings(BaseModel):
    path: Optional[str] = None


class EvaluationSettings(BaseModel):
    isolate: bool = True


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "console"


class ClientSettings(BaseModel):
    url: str = "http://localhost:8888/mcp"
    timeout: float = 30
    protocol_version: str = "2024-11-05"


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    ruleset: RulesetSettings = Field(default_factory=RulesetSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)


def read_settings(config_path: Optional[str] = None) -> Settings:
    """
    Resolution order: explicit path > EXCEDENCIA_CONFIG > bundled settings.yaml.
    EXCEDENCIA_LOG_LEVEL overrides logging.level.
    """
    path = Path(config_path or os.getenv("EXCEDENCIA_CONFIG") or DEFAULT_CONFIG_PATH)
    loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: expected a mapping of settings sections, got {type(loaded).__name__}")
    # an empty section ("logging:") means defaults
    raw: Dict[str, Any] = {k: v for k, v in loaded.items() if v is not None}

    level = os.getenv("EXCEDENCIA_LOG_LEVEL")
    if level:
        logging_cfg = dict(raw.get("logging") or {})
        logging_cfg["level"] = level.upper()
        raw["logging"] = logging_cfg

    return Settings.model_validate(raw)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return read_settings()
