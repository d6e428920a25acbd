"""Logger configuration for YubiGoblin."""

import sys

from loguru import logger

from .settings import LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    """Configure loguru logger for console and file output.

    Sets up:
    - Console output on stderr with colored output
    - Optional file output with rotation and retention
    - Log level from configuration
    """

    # Remove default loguru handler
    logger.remove()

    if config.to_console:
        logger.add(
            sink=sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            level=config.level,
            colorize=True,
        )

    if config.to_file:
        config.file_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            sink=str(config.file_path),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=config.level,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
            enqueue=True,  # Thread-safe logging
        )

        logger.info(f"File logging enabled: {config.file_path}")
        logger.info(f"Log level: {config.level}")
