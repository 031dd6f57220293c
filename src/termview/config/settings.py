"""Configuration management for termview.

Loads settings from a YAML configuration file with environment variable
overrides for sensitive values (the bot token) and for the legacy
deployment variables (ALLOWED_ROLES, SEPERATOR). Supports .env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termview.yaml")


class ChatConfig(BaseModel):
    api_base_url: str = Field(default="https://discord.com/api/v10")
    http_timeout: float = Field(default=10.0, gt=0)
    allowed_roles: list[str] = Field(default_factory=list)
    separator: str = Field(default=":", min_length=1, max_length=1)
    message_limit: int = Field(default=2000, gt=8, description="Max characters per chat message")

    @field_validator("allowed_roles", mode="before")
    @classmethod
    def _split_roles(cls, value: object) -> object:
        if isinstance(value, str):
            return [role.strip() for role in value.split(";") if role.strip()]
        return value


class TerminalConfig(BaseModel):
    default_height: int = Field(default=20, gt=0)
    max_height: int = Field(default=100, gt=0)
    cooldown: float = Field(default=4.0, ge=0, description="Seconds between output updates")
    grace_period: float = Field(default=2.0, ge=0, description="Wait before replacing a terminal")
    command_buffer: int = Field(default=10, gt=0)
    shell: str = Field(default="bash")

    @model_validator(mode="after")
    def _check_heights(self) -> TerminalConfig:
        if self.default_height > self.max_height:
            raise ValueError("default_height must not exceed max_height")
        return self


class SinkConfig(BaseModel):
    queue_size: int = Field(default=10, gt=0)


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the termview system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "TERMVIEW_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    bot_token: SecretStr = Field(default=SecretStr(""))

    chat: ChatConfig = Field(default_factory=ChatConfig)
    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply the non-prefixed deployment variables.

    DISCORD_TOKEN, ALLOWED_ROLES (semicolon separated role IDs) and
    SEPERATOR/SEPARATOR (only the first character counts).
    """
    token = os.environ.get("DISCORD_TOKEN", "")
    roles = os.environ.get("ALLOWED_ROLES", "")
    separator = os.environ.get("SEPARATOR") or os.environ.get("SEPERATOR", "")

    if token:
        yaml_data["bot_token"] = token

    if "chat" not in yaml_data:
        yaml_data["chat"] = {}

    if roles:
        yaml_data["chat"]["allowed_roles"] = roles

    if separator:
        yaml_data["chat"]["separator"] = separator[0]
