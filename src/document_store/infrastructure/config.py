"""Configuration management for the document store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseModel):
    """On-disk layout of one logical database."""

    database_dir: Path = Field(default=Path("database"), description="Database root directory")
    database_file_name: str = Field(
        default="database", description="Database file name (without .json)"
    )
    tables_folder_name: str = Field(default="Tables", description="Table files folder")
    table_file_suffix: str = Field(default="_table", description="Suffix of table file names")
    schemas_folder_name: str = Field(default="Schemas", description="Schema versions folder")
    schema_file_prefix: str = Field(
        default="schema_v", min_length=1, description="Prefix of schema version file names"
    )
    json_indent: int | None = Field(
        default=2, ge=0, description="Indentation of written JSON files (None for compact)"
    )

    @property
    def schemas_dir(self) -> Path:
        """Folder holding one file per schema version."""
        return self.database_dir / self.schemas_folder_name

    @property
    def tables_dir(self) -> Path:
        """Folder holding one file per record type."""
        return self.database_dir / self.tables_folder_name

    @property
    def database_file(self) -> Path:
        """File recording which schema version the database runs on."""
        return self.database_dir / f"{self.database_file_name}.json"


class VersioningConfig(BaseModel):
    """Schema versioning configuration."""

    app_version: str = Field(default="1.0", min_length=1, description="Current application version")
    auto_update: bool = Field(
        default=True,
        description="Run on the latest schema version instead of the one pinned in the database file",
    )
    bootstrap_schema: bool = Field(
        default=True,
        description="Give a never-saved, empty schema one table per registered type on load",
    )


class QueryConfig(BaseModel):
    """Query configuration."""

    batch_size: int = Field(default=64, ge=1, description="Records per batch for incremental scans")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    service_name: str = Field(default="document_store", description="Service name for tracing")
    console_tracing: bool = Field(default=False, description="Export spans to the console")


class Config(BaseSettings):
    """Main configuration for the document store."""

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENT_STORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure database, schemas and tables directories exist."""
        self.storage.database_dir.mkdir(parents=True, exist_ok=True)
        self.storage.schemas_dir.mkdir(parents=True, exist_ok=True)
        self.storage.tables_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
