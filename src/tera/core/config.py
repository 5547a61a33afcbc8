"""
Configuration management for Tera
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger


@dataclass
class PlayerConfig:
    """Configuration for the mpv playback process."""

    mpv_binary: str = "mpv"
    default_volume: int = 100
    auto_reconnect: bool = True  # Retry after the stream drops
    reconnect_delay: int = 5  # Max seconds between reconnect attempts
    stream_buffer_mb: int = 0  # 0 disables caching
    metadata_poll_interval: float = 5.0  # Seconds between media-title polls
    stop_timeout: float = 2.0  # Seconds to wait after SIGTERM before SIGKILL

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 <= self.default_volume <= 100:
            raise ValueError(
                f"default_volume must be between 0 and 100, got {self.default_volume}"
            )
        if not 1 <= self.reconnect_delay <= 30:
            raise ValueError(
                f"reconnect_delay must be between 1 and 30 seconds, got {self.reconnect_delay}"
            )
        if self.stream_buffer_mb != 0 and not 10 <= self.stream_buffer_mb <= 200:
            raise ValueError(
                f"stream_buffer_mb must be 0 or between 10 and 200, got {self.stream_buffer_mb}"
            )
        if self.metadata_poll_interval <= 0:
            raise ValueError("metadata_poll_interval must be positive")
        if self.stop_timeout <= 0:
            raise ValueError("stop_timeout must be positive")


@dataclass
class StorageConfig:
    """Locations of the persistent stores (default: config directory)."""

    blocklist_file: Optional[str] = None
    voted_stations_file: Optional[str] = None


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/tera/tera.log
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "tera"
    return Path.home() / ".config" / "tera"


def get_config_path() -> Path:
    """Get the main configuration file path."""
    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "tera"
    return Path.home() / ".local" / "share" / "tera"


def get_blocklist_path(config: Config) -> Path:
    """Path of the blocklist document."""
    if config.storage.blocklist_file:
        return Path(config.storage.blocklist_file).expanduser()
    return get_config_dir() / "blocklist.json"


def get_voted_stations_path(config: Config) -> Path:
    """Path of the voted-stations document."""
    if config.storage.voted_stations_file:
        return Path(config.storage.voted_stations_file).expanduser()
    return get_config_dir() / "voted_stations.json"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Tera Configuration

[player]
# mpv executable (name on PATH or absolute path)
mpv_binary = "mpv"

# Volume used when a station has no saved volume (0-100)
default_volume = 100

# Reconnect automatically when a stream drops
auto_reconnect = true

# Maximum delay between reconnect attempts in seconds (1-30)
reconnect_delay = 5

# Stream buffer in MB (0 disables caching, otherwise 10-200)
stream_buffer_mb = 0

# Seconds between now-playing metadata polls
metadata_poll_interval = 5.0

# Seconds to wait for mpv to exit before killing it
stop_timeout = 2.0

[storage]
# Custom store locations (default: alongside this file)
# blocklist_file = "~/.config/tera/blocklist.json"
# voted_stations_file = "~/.config/tera/voted_stations.json"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/tera/tera.log)
# log_file = "/path/to/custom/tera.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5
""".strip()


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - TERA_MPV_BINARY
    - TERA_LOG_LEVEL
    """
    # Load .env file from config directory if it exists
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        # Create config directory and default file
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        logger.info(f"Created default configuration at: {config_path}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error loading configuration from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return _apply_env_overrides(Config())

    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_binary=player_data.get("mpv_binary", config.player.mpv_binary),
            default_volume=player_data.get(
                "default_volume", config.player.default_volume
            ),
            auto_reconnect=player_data.get(
                "auto_reconnect", config.player.auto_reconnect
            ),
            reconnect_delay=player_data.get(
                "reconnect_delay", config.player.reconnect_delay
            ),
            stream_buffer_mb=player_data.get(
                "stream_buffer_mb", config.player.stream_buffer_mb
            ),
            metadata_poll_interval=player_data.get(
                "metadata_poll_interval", config.player.metadata_poll_interval
            ),
            stop_timeout=player_data.get("stop_timeout", config.player.stop_timeout),
        )
        # Validate player config
        try:
            config.player.validate()
        except ValueError as e:
            logger.warning(f"Invalid player configuration: {e}")
            logger.warning("Using default player configuration.")
            config.player = PlayerConfig()

    if "storage" in toml_data:
        storage_data = toml_data["storage"]
        config.storage = StorageConfig(
            blocklist_file=storage_data.get("blocklist_file"),
            voted_stations_file=storage_data.get("voted_stations_file"),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get(
                "backup_count", config.logging.backup_count
            ),
        )

    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    mpv_binary = os.environ.get("TERA_MPV_BINARY")
    log_level = os.environ.get("TERA_LOG_LEVEL")

    if mpv_binary:
        config.player.mpv_binary = mpv_binary
    if log_level:
        config.logging.level = log_level.upper()

    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
