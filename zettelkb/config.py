"""
Configuration for ZettelKB.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """Note store backend configuration."""

    backend: str = "sqlite"  # sqlite, memory
    db_path: str = "data/zettelkb.db"
    busy_timeout_ms: int = 5000


class KnowledgeBaseConfig(BaseModel):
    """Knowledge-base engine behaviour."""

    allocation_retries: int = Field(default=16, ge=0)
    # Seconds; doubled after each lost race, capped, then jittered
    allocation_retry_delay: float = Field(default=0.005, ge=0)
    allocation_max_retry_delay: float = Field(default=0.5, ge=0)
    allow_empty_index: bool = True
    index_title_prefix: str = "Index"
    search_limit: int | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class ApiConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


class Config(BaseModel):
    """Main configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    kb: KnowledgeBaseConfig = Field(default_factory=KnowledgeBaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            ZETTEL_STORE_BACKEND: Store backend (sqlite, memory)
            ZETTEL_DB_PATH: SQLite database path
            ZETTEL_DB_BUSY_TIMEOUT_MS: SQLite busy timeout
            ZETTEL_ALLOCATION_RETRIES: Retries after a lost allocation race
            ZETTEL_ALLOCATION_RETRY_DELAY: Base backoff after a lost race (seconds)
            ZETTEL_ALLOCATION_MAX_RETRY_DELAY: Backoff cap (seconds)
            ZETTEL_ALLOW_EMPTY_INDEX: Allow index cards without children
            ZETTEL_INDEX_TITLE_PREFIX: Title prefix for index cards
            ZETTEL_SEARCH_LIMIT: Maximum search results (unset = unlimited)
            ZETTEL_LOG_LEVEL: Log level
            ZETTEL_API_HOST / ZETTEL_API_PORT: HTTP bind address
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None, cast: type | None = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int) or cast is int:
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            store=StoreConfig(
                backend=get_env("ZETTEL_STORE_BACKEND", "sqlite"),
                db_path=get_env("ZETTEL_DB_PATH", "data/zettelkb.db"),
                busy_timeout_ms=get_env("ZETTEL_DB_BUSY_TIMEOUT_MS", 5000),
            ),
            kb=KnowledgeBaseConfig(
                allocation_retries=get_env("ZETTEL_ALLOCATION_RETRIES", 16),
                allocation_retry_delay=get_env("ZETTEL_ALLOCATION_RETRY_DELAY", 0.005),
                allocation_max_retry_delay=get_env("ZETTEL_ALLOCATION_MAX_RETRY_DELAY", 0.5),
                allow_empty_index=get_env("ZETTEL_ALLOW_EMPTY_INDEX", True),
                index_title_prefix=get_env("ZETTEL_INDEX_TITLE_PREFIX", "Index"),
                search_limit=get_env("ZETTEL_SEARCH_LIMIT", cast=int),
            ),
            logging=LoggingConfig(
                level=get_env("ZETTEL_LOG_LEVEL", "INFO"),
                log_to_file=get_env("ZETTEL_LOG_TO_FILE", False),
                log_dir=get_env("ZETTEL_LOG_DIR", "logs"),
                file_rotation=get_env("ZETTEL_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("ZETTEL_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("ZETTEL_LOG_COMPRESSION", "zip"),
                serialize=get_env("ZETTEL_LOG_SERIALIZE", True),
            ),
            api=ApiConfig(
                host=get_env("ZETTEL_API_HOST", "127.0.0.1"),
                port=get_env("ZETTEL_API_PORT", 8000),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        # Start with YAML if provided
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        # Override with env vars if present
        env_config = cls.from_env(env_file=env_file)

        # Merge: env vars override YAML
        final_dict = {**config_dict}

        # Apply env overrides (non-default values)
        default = cls()
        if env_config.store != default.store:
            final_dict["store"] = env_config.store.model_dump()
        if env_config.kb != default.kb:
            final_dict["kb"] = env_config.kb.model_dump()
        if env_config.logging != default.logging:
            final_dict["logging"] = env_config.logging.model_dump()
        if env_config.api != default.api:
            final_dict["api"] = env_config.api.model_dump()

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
