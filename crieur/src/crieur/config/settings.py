"""
Configuration management for Crieur.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Crieur configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/production.yaml: Production overrides
        - config/development.yaml: Development overrides
        - config/test.yaml: Test overrides
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Crieur"
    env: str = Field(default="production", description="Environment name")

    # API Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)

    # Channels pre-created at startup by user "system"
    channels: List[str] = Field(default_factory=lambda: ["general"])
    max_messages: int = Field(
        default=50, ge=1, description="Per-channel history bound"
    )

    # Liveness
    heartbeat_interval_ms: int = Field(default=30000, ge=100)
    probe_timeout_ms: int = Field(default=5000, ge=10)

    # Outbound delivery
    outbound_queue_size: int = Field(default=256, ge=1)
    slow_consumer_policy: str = Field(default="drop_oldest")

    # Frame validation
    max_frame_size: int = Field(
        default=65_536, ge=1024, description="Maximum WebSocket frame size in bytes"
    )
    max_text_length: int = Field(default=1000, ge=1)
    max_username_length: int = Field(default=50, ge=1)
    max_channel_name_length: int = Field(default=100, ge=1)

    # JWT Authentication
    require_auth: bool = Field(
        default=False,
        description="Require a JWT token for WebSocket connections",
    )
    jwt_secret: Optional[str] = Field(
        default=None, description="JWT secret key (from environment)"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")

    # Logging
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)

    # Client reconnect
    reconnect_max_attempts: int = Field(default=5, ge=0)
    reconnect_base_delay_ms: int = Field(default=1000, ge=1)
    reconnect_max_delay_ms: int = Field(default=30000, ge=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("slow_consumer_policy")
    @classmethod
    def validate_slow_consumer_policy(cls, v: str) -> str:
        """Validate slow consumer policy."""
        allowed = ["drop_oldest", "disconnect"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(
                f"Invalid slow_consumer_policy. Must be one of: {allowed}"
            )
        return v_lower


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    # Service root is crieur/ (4 levels up from this file)
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = project_root / "config"

    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.test", "test.yaml"),
    }

    default_env_file, default_config_file = env_map.get(
        environment, (".env.production", "production.yaml")
    )
    if env_file is None:
        env_file = default_env_file
    if config_file is None:
        config_file = default_config_file

    # Load .env file FIRST so its variables win over YAML
    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged_config = {}

    default_config_path = config_dir / "default.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    env_config_path = config_dir / config_file
    if env_config_path.exists():
        with open(env_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config.update(loaded)

    merged_config["env"] = environment

    # Environment variables override YAML values
    for key in list(merged_config):
        if key.upper() in os.environ or key in os.environ:
            del merged_config[key]

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).

    This allows tests to change environment variables and reload config.
    """
    global _settings
    _settings = None
