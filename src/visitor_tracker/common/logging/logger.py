"""Centralized logging configuration."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the tracker process."""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with its own stream handler.

    Used by entry points that run outside the gateway, where
    ``configure_logging`` has not been called.
    """
    logger = logging.getLogger(name)
    
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    
    return logger
