"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging (Loguru)
- Atomic JSON document persistence
- Reader/writer locking

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    LoggingConfig,
    PlayerConfig,
    StorageConfig,
    create_default_config,
    ensure_directories,
    get_blocklist_path,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_voted_stations_path,
    load_config,
)

# Errors
from .exceptions import (
    DocumentParseError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    TeraError,
)

# Persistence
from .jsonstore import (
    format_timestamp,
    parse_timestamp,
    read_json_document,
    utc_now,
    write_json_atomic,
)
from .locks import ReadWriteLock

# Logging
from .output import setup_logging, setup_loguru

__all__ = [
    # Config
    "Config",
    "LoggingConfig",
    "PlayerConfig",
    "StorageConfig",
    "create_default_config",
    "ensure_directories",
    "get_blocklist_path",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_voted_stations_path",
    "load_config",
    # Errors
    "DocumentParseError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "TeraError",
    # Persistence
    "format_timestamp",
    "parse_timestamp",
    "read_json_document",
    "utc_now",
    "write_json_atomic",
    "ReadWriteLock",
    # Logging
    "setup_logging",
    "setup_loguru",
]
