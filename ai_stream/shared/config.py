#!/usr/bin/env python3
"""
Configuration module for the AI stream relay.
Loads settings from an optional YAML file plus environment overrides,
validates them with Pydantic and initializes logging.
"""

import os
import logging
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError

from ai_stream.shared.cors import parse_allow_origins

CONFIG_FILE = "config.yml"
CONFIG_FILE_ENV = "AI_STREAM_CONFIG"

logger = logging.getLogger("ai-stream")


class ConfigError(Exception):
    """Raised when the configuration file cannot be parsed or validated."""


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    host: str = "0.0.0.0"
    port: int = 8888
    log_level: str = "INFO"
    http_log_level: str = "INFO"


class OpenAIConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    url: str = "https://api.openai.com/v1/responses"
    model: str = "gpt-5"
    reasoning_effort: str = "low"
    default_error_status: int = 502
    timeout: float = 600.0
    api_key: Optional[SecretStr] = None


class CorsConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    allow_origins: Tuple[str, ...] = ()


class RelayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    server: ServerConfig = ServerConfig()
    openai: OpenAIConfig = OpenAIConfig()
    cors: CorsConfig = CorsConfig()


def _read_config_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as file:
            return yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.info("Configuration file %s not found, using defaults.", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error in configuration file {path}: {e}") from e


def load_config(
    path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
) -> RelayConfig:
    """Load and validate configuration.

    Precedence, lowest first: built-in defaults, the YAML file, then the
    ``OPENAI_API_KEY`` and ``ALLOW_ORIGINS`` environment variables.
    """
    env = os.environ if environ is None else environ
    path = path or env.get(CONFIG_FILE_ENV) or CONFIG_FILE

    config_data = _read_config_file(path)
    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping.")
    for section in ("server", "openai", "cors"):
        if config_data.get(section) is None:
            config_data.pop(section, None)

    if env.get("OPENAI_API_KEY"):
        config_data.setdefault("openai", {})["api_key"] = env["OPENAI_API_KEY"]

    if "ALLOW_ORIGINS" in env:
        config_data.setdefault("cors", {})["allow_origins"] = parse_allow_origins(env["ALLOW_ORIGINS"])
    elif isinstance(config_data.get("cors", {}).get("allow_origins"), str):
        config_data["cors"]["allow_origins"] = parse_allow_origins(config_data["cors"]["allow_origins"])

    try:
        return RelayConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Error in configuration: {e}") from e


def setup_logging(config_: RelayConfig) -> logging.Logger:
    """Configure logging based on validated configuration."""
    log_level = config_.server.log_level
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level_int,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.setLevel(log_level_int)
    logger.info("Logging level set to %s", log_level)
    return logger
