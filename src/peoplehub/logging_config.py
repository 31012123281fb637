"""Logging configuration."""

import logging
import sys


def setup_logging(log_level: str = "INFO", service_name: str = "peoplehub") -> None:
    """Configure root logging for processes embedding the core.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name included in every log line
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=f"%(asctime)s - {service_name} - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # SQL statements may carry sensitive values
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
