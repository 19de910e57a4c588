from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field
from typing import Optional, Union, Literal, Annotated
from dotenv import load_dotenv
import os
load_dotenv()

## --------------------------------------- App configs --------------------------------------- ##

class AppSettings(BaseModel):
    name: str = "webcrawl-chat"
    log_level: str = "INFO"
    log_file: Optional[str] = None

## --------------------------------------- Backend configs --------------------------------------- ##

class BackendConfig(BaseModel):
    host: str = "http://127.0.0.1:8000"
    api_prefix: str = "/api/v1"
    timeout: float = Field(default=300.0, gt=0)
    crawl_path: str = "crawl"
    # Path name as served by the backend
    discussion_path: str = "dicission"
    keywords_path: str = "keyword/all"
    keyword_detail_path: str = "keyword/full"

    @property
    def base_url(self) -> str:
        return f"{self.host.rstrip('/')}/{self.api_prefix.strip('/')}/"

## --------------------------------------- Streaming configs --------------------------------------- ##

class StreamingConfig(BaseModel):
    tick_interval_ms: float = Field(default=5.0, ge=0)

    @property
    def tick_interval(self) -> float:
        return self.tick_interval_ms / 1000.0

## --------------------------------------- Storage configs --------------------------------------- ##

class StorageConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_file_encoding="utf-8"
    )
    type: str

class MemoryStorageConfig(StorageConfig):
    type: Literal["memory"]

class FileStorageConfig(StorageConfig):
    type: Literal["file"]
    directory: str = Field(default_factory=lambda: os.getenv("WEBCRAWL_STORAGE_DIR", ".webcrawl_chat/chats"))

class RedisStorageConfig(StorageConfig):
    type: Literal["redis"]
    host: str = Field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = Field(default_factory=lambda: int(os.getenv("REDIS_PORT", 6379)))
    db: int = Field(default_factory=lambda: int(os.getenv("REDIS_DB", 0)))
    password: str | None = Field(default_factory=lambda: os.getenv("REDIS_PASSWORD", None))
    pool_size: int = Field(default_factory=lambda: int(os.getenv("REDIS_POOL_SIZE", 10)))
    key_prefix: str = Field(default_factory=lambda: os.getenv("REDIS_KEY_PREFIX", "webcrawl_chat:"))

# Discriminated union for storage config
StorageConfigUnion = Annotated[
    Union[MemoryStorageConfig, FileStorageConfig, RedisStorageConfig],
    Field(discriminator="type")
]
