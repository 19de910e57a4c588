import threading
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from hydra import initialize, compose
from omegaconf import OmegaConf

from webcrawl_chat.config.schemas import (
    AppSettings,
    BackendConfig,
    StreamingConfig,
    StorageConfigUnion,
    MemoryStorageConfig,
)
from webcrawl_chat.utils.error_handler import ConfigurationError


class AppConfig(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    storage: StorageConfigUnion = Field(default_factory=lambda: MemoryStorageConfig(type="memory"))


# Singleton cache and lock
_config_instance: Optional[AppConfig] = None
_config_lock = threading.Lock()


def load_config(overrides: Optional[list[str]] = None) -> AppConfig:
    """Compose the packaged config with hydra and validate it.

    Args:
        overrides: Hydra override strings, e.g. ``["backend.timeout=10"]``

    Raises:
        ConfigurationError: If the config cannot be composed or validated
    """
    try:
        with initialize(config_path="../configs", version_base=None):
            cfg = compose(config_name="config", overrides=overrides or [])
            cfg_dict: Dict[str, Any] = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)
        return AppConfig(**cfg_dict)
    except Exception as e:
        raise ConfigurationError(f"Error loading configuration: {e}") from e


def get_config() -> AppConfig:
    global _config_instance
    if _config_instance is not None:
        return _config_instance

    with _config_lock:
        if _config_instance is None:
            _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() recomposes it."""
    global _config_instance
    with _config_lock:
        _config_instance = None
