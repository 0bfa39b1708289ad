# Configuration loader with environment variable support

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import GraphSyncBaseModel

logger = logging.getLogger(__name__)

DEFAULT_HOST_NAME = "http://localhost:9200"
DEFAULT_READ_TIMEOUT_SECONDS = 60.0


class ElasticsearchConfig(BaseModel):
    """Connection settings for the search transport."""

    host_name: str = DEFAULT_HOST_NAME
    read_timeout_seconds: float = Field(default=DEFAULT_READ_TIMEOUT_SECONDS, gt=0)
    use_async: bool = True
    max_workers: int = Field(default=4, gt=0)
    # Send _type in bulk action lines (clusters with mapping types only)
    include_type: bool = False

    @field_validator("host_name")
    @classmethod
    def _host_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("elasticsearch host_name cannot be empty")
        return value.strip().rstrip("/")


class IndexingConfig(BaseModel):
    """Which labels go to which index, and how documents are shaped."""

    index_spec: Optional[str] = None
    index_all: Optional[str] = None
    include_id_field: bool = True
    include_labels_field: bool = True

    @field_validator("index_spec", "index_all")
    @classmethod
    def _blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


class MonitoringConfig(BaseModel):
    metrics_enabled: bool = True


class Config(GraphSyncBaseModel):
    """Main configuration model"""

    elasticsearch: ElasticsearchConfig = Field(default_factory=ElasticsearchConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)


class Settings(BaseSettings):
    """Environment-based settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="development", alias="ENV")
    config_path: Optional[str] = Field(default=None, alias="CONFIG_PATH")

    # Search transport
    elasticsearch_host_name: Optional[str] = Field(
        default=None, alias="ELASTICSEARCH_HOST_NAME"
    )
    elasticsearch_read_timeout: Optional[float] = Field(
        default=None, alias="ELASTICSEARCH_READ_TIMEOUT"
    )
    elasticsearch_async: Optional[bool] = Field(default=None, alias="ELASTICSEARCH_ASYNC")
    elasticsearch_include_type: Optional[bool] = Field(
        default=None, alias="ELASTICSEARCH_INCLUDE_TYPE"
    )

    # Index bindings
    elasticsearch_index_spec: Optional[str] = Field(
        default=None, alias="ELASTICSEARCH_INDEX_SPEC"
    )
    elasticsearch_index_all: Optional[str] = Field(
        default=None, alias="ELASTICSEARCH_INDEX_ALL"
    )
    elasticsearch_include_id_field: Optional[bool] = Field(
        default=None, alias="ELASTICSEARCH_INCLUDE_ID_FIELD"
    )
    elasticsearch_include_labels_field: Optional[bool] = Field(
        default=None, alias="ELASTICSEARCH_INCLUDE_LABELS_FIELD"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


def _default_config_path(settings: Settings) -> Path:
    """
    ``config/<env>.yaml`` under the working directory, else under the source
    checkout this module was loaded from (editable installs).
    """
    name = f"{settings.env}.yaml"
    cwd_path = Path.cwd() / "config" / name
    if cwd_path.exists():
        return cwd_path
    return Path(__file__).parent.parent.parent.parent / "config" / name


@lru_cache(maxsize=8)
def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(config: Config, settings: Settings) -> Config:
    """Environment variables win over YAML values when they are set."""
    es = config.elasticsearch.model_dump()
    idx = config.indexing.model_dump()

    if settings.elasticsearch_host_name is not None:
        es["host_name"] = settings.elasticsearch_host_name
    if settings.elasticsearch_read_timeout is not None:
        es["read_timeout_seconds"] = settings.elasticsearch_read_timeout
    if settings.elasticsearch_async is not None:
        es["use_async"] = settings.elasticsearch_async
    if settings.elasticsearch_include_type is not None:
        es["include_type"] = settings.elasticsearch_include_type

    if settings.elasticsearch_index_spec is not None:
        idx["index_spec"] = settings.elasticsearch_index_spec
    if settings.elasticsearch_index_all is not None:
        idx["index_all"] = settings.elasticsearch_index_all
    if settings.elasticsearch_include_id_field is not None:
        idx["include_id_field"] = settings.elasticsearch_include_id_field
    if settings.elasticsearch_include_labels_field is not None:
        idx["include_labels_field"] = settings.elasticsearch_include_labels_field

    return config.model_copy(
        update={
            "elasticsearch": ElasticsearchConfig(**es),
            "indexing": IndexingConfig(**idx),
        }
    )


def load_config() -> tuple[Config, Settings]:
    """
    Load configuration from an optional YAML file and environment variables.

    Returns:
        tuple: (Config, Settings) - YAML config and environment settings

    Raises:
        FileNotFoundError: If CONFIG_PATH is set but the file does not exist
        pydantic.ValidationError: If configuration validation fails
    """
    settings = Settings()

    if settings.config_path:
        config_path = Path(settings.config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = _default_config_path(settings)

    if config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        config = Config(**_read_yaml(str(config_path.resolve())))
    else:
        logger.info(f"No configuration file at {config_path}, using defaults")
        config = Config()

    return apply_env_overrides(config, settings), settings


# Global config instances (loaded once at startup)
_config: Optional[Config] = None
_settings: Optional[Settings] = None


def get_config() -> Config:
    """Get the global Config instance"""
    global _config
    if _config is None:
        init_config()
    return _config


def get_settings() -> Settings:
    """Get the global Settings instance"""
    global _settings
    if _settings is None:
        init_config()
    return _settings


def init_config() -> tuple[Config, Settings]:
    """Initialize and cache global config instances"""
    global _config, _settings
    _config, _settings = load_config()
    return _config, _settings


def reload_config() -> tuple[Config, Settings]:
    """Force reload of config/settings from disk and environment."""
    _read_yaml.cache_clear()
    return init_config()
