"""
Module auditor configuration.

Loaded from a YAML document (JSON documents parse too). Two groups are
required:

    database:
      hostname: "sql01.example.local"
      database: "inventory"
      username: "auditor"
      password: "secret"
      driver: "postgresql+psycopg"   # optional

    folders:
      - path: "C:/Program Files/Vendor"
        include_subfolders: true
      - path: "/opt/vendor/bin"

Optional top-level keys: file_pattern, log_level, log_dir.
Keys are matched case-insensitively; camelCase spellings are accepted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from sqlalchemy.engine import URL

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


def _normalize_keys(data: Any, fields: dict) -> Any:
    """Map keys like 'IncludeSubfolders' or 'include-subfolders' onto field names."""
    if not isinstance(data, dict):
        return data

    lookup = {name.replace("_", ""): name for name in fields}
    normalized = {}
    for key, value in data.items():
        folded = str(key).replace("_", "").replace("-", "").lower()
        normalized[lookup.get(folded, key)] = value
    return normalized


class DatabaseConfig(BaseModel):
    """Inventory store connection settings."""

    hostname: str = Field(..., description="Host, or IP, to connect to")
    database: str = Field(..., description="Database to connect to (file path for sqlite)")
    username: str = Field(..., description="User to log in with")
    password: str = Field(..., description="Password to use")

    port: Optional[int] = Field(default=None, ge=1, le=65535, description="Server port")
    driver: str = Field(
        default="postgresql+psycopg",
        description="SQLAlchemy driver name, e.g. postgresql+psycopg, mssql+pyodbc, sqlite"
    )

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='before')
    @classmethod
    def normalize_keys(cls, data):
        return _normalize_keys(data, cls.model_fields)

    def url(self) -> URL:
        """SQLAlchemy URL for these settings."""
        if self.driver.startswith("sqlite"):
            return URL.create(self.driver, database=self.database)

        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.hostname,
            port=self.port,
            database=self.database,
        )


class FolderEntry(BaseModel):
    """A directory to sweep."""

    path: str = Field(..., min_length=1, description="Full path of the folder to scan")
    include_subfolders: bool = Field(default=False, description="Recurse into subfolders")

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='before')
    @classmethod
    def normalize_keys(cls, data):
        if isinstance(data, str):
            return {"path": data}
        data = _normalize_keys(data, cls.model_fields)
        if isinstance(data, dict) and data.get("include_subfolders") is None:
            data.pop("include_subfolders", None)
        return data


class AuditConfig(BaseModel):
    """Complete configuration for one sweep."""

    database: DatabaseConfig
    folders: list[FolderEntry] = Field(..., min_length=1)

    file_pattern: str = Field(default="*.dll", min_length=1, description="Glob of files to inspect")
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for the run log file")

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='before')
    @classmethod
    def normalize_keys(cls, data):
        return _normalize_keys(data, cls.model_fields)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError('log_level must be DEBUG, INFO, WARNING, or ERROR')
        return v

    @field_validator('file_pattern')
    @classmethod
    def lower_file_pattern(cls, v):
        return v.lower()

    @property
    def resolved_log_dir(self) -> Path:
        return self.log_dir or Path.cwd()


def default_config_path() -> Path:
    return Path.cwd() / CONFIG_FILENAME


def parse_config(data: Any, source: str = "config") -> AuditConfig:
    """
    Validate an already-decoded configuration document.

    Raises:
        ConfigError: if a required group is missing or a value is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Unable to load config from {source}: document is not a mapping")

    data = _normalize_keys(data, AuditConfig.model_fields)

    if data.get("database") is None:
        raise ConfigError("The 'database' group is required.")

    if not data.get("folders"):
        raise ConfigError("The 'folders' group is required and must have at least 1 entry.")

    try:
        return AuditConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {source}: {e}") from e


def load_config(path: Optional[Path | str] = None) -> AuditConfig:
    """
    Load configuration from disk.

    Args:
        path: Config file; defaults to ./config.yaml

    Raises:
        ConfigError: if the file is missing, unreadable or invalid
    """
    config_path = Path(path) if path else default_config_path()

    if not config_path.is_file():
        raise ConfigError(f"Unable to find config file: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to load config from file: {config_path}: {e}") from e

    config = parse_config(data, source=str(config_path))
    logger.info(f"Loaded configuration from {config_path} ({len(config.folders)} folders)")
    return config
