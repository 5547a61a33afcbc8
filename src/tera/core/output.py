"""
Logging setup using Loguru.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LoggingConfig, get_data_dir


def get_log_file_path() -> Path:
    """Get the path to the default log file."""
    return get_data_dir() / "tera.log"


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    rotation_mb: int = 10,
    retention: int = 5,
) -> None:
    """
    Configure loguru for file-only logging (the terminal belongs to the UI).

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
        rotation_mb: Rotate once the file reaches this size
        retention: Number of rotated files to keep
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Remove default handler
    logger.remove()

    logger.add(
        log_file,
        rotation=f"{rotation_mb} MB",
        retention=retention,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes (thread-safe but blocking)
    )

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def setup_logging(logging_config: LoggingConfig, log_file: Optional[Path] = None) -> Path:
    """Configure loguru from the [logging] config section.

    Returns:
        The log file in use
    """
    if log_file is None:
        log_file = (
            Path(logging_config.log_file)
            if logging_config.log_file
            else get_log_file_path()
        )

    setup_loguru(
        log_file,
        level=logging_config.level,
        rotation_mb=logging_config.max_file_size_mb,
        retention=logging_config.backup_count,
    )
    return log_file
