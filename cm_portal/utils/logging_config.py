"""
Centralized logging configuration for the portal API
"""
import logging
import sys
from typing import Optional


NOISY_LOGGERS = (
    "azure",
    "azure.cosmos",
    "azure.identity",
    "azure.core",
    "azure.storage.blob",
    "urllib3",
)


def setup_application_logging(level: str = "INFO", force_flush: bool = True) -> logging.Logger:
    """
    Setup application-wide logging configuration

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        force_flush: Whether to force line buffering on stdout
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if force_flush and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(line_buffering=True)

    logger = logging.getLogger(__name__)
    logger.info(f"🔧 Application logging configured at {level.upper()} level")
    return logger


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with consistent formatting

    Args:
        name: Logger name (usually __name__)
        level: Optional specific level for this logger
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger
